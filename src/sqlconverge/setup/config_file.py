# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/setup/config_file.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .arguments import InstallerArguments

log = logging.getLogger("sqlconverge")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_NAME = "ConfigurationFile.ini.j2"

# Must stay on the command line even in configuration-file mode
COMMAND_LINE_KEYS = {"QUIET", "IACCEPTSQLSERVERLICENSETERMS"}


@dataclass(frozen=True)
class SplitArguments:
    file_arguments: InstallerArguments
    command_arguments: InstallerArguments


def _jinja() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )


def split_arguments(args: InstallerArguments) -> SplitArguments:
    file_args = InstallerArguments()
    command_args = InstallerArguments()
    for arg in args:
        if arg.secret or arg.key in COMMAND_LINE_KEYS:
            command_args.add_argument(arg)
        elif not arg.is_empty:
            file_args.add_argument(arg)
    return SplitArguments(file_arguments=file_args, command_arguments=command_args)


def render_configuration_file(args: InstallerArguments, instance_name: str) -> str:
    return _jinja().get_template(TEMPLATE_NAME).render(
        instance_name=instance_name,
        arguments=list(args),
    )


def write_configuration_file(
    args: InstallerArguments,
    *,
    instance_name: str,
    path: Path,
) -> InstallerArguments:
    """
    Write the non-secret arguments to *path* and return what is left for the
    command line, with CONFIGURATIONFILE pointing at the written file.
    """
    split = split_arguments(args)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_configuration_file(split.file_arguments, instance_name))
    log.debug("Wrote installer configuration file %s (%d options)", path, len(split.file_arguments))

    command_args = split.command_arguments
    command_args.add("CONFIGURATIONFILE", str(path))
    return command_args
