from pathlib import Path

from sqlconverge.setup.arguments import InstallerArguments
from sqlconverge.setup.config_file import render_configuration_file, write_configuration_file


def _args():
    args = InstallerArguments()
    args.add("QUIET", True)
    args.add("IACCEPTSQLSERVERLICENSETERMS", True)
    args.add("ACTION", "Install")
    args.add("FEATURES", ["SQLENGINE", "FULLTEXT"])
    args.add("INSTANCENAME", "MSSQLSERVER")
    args.add("SQLSYSADMINACCOUNTS", ["CORP\\installer"])
    args.add("SAPWD", "Sup3rSecret!", secret=True)
    return args


def test_render_configuration_file_has_options_section():
    text = render_configuration_file(_args(), "MSSQLSERVER")
    assert "[OPTIONS]" in text
    assert "FEATURES=FULLTEXT,SQLENGINE" in text
    assert 'INSTANCENAME="MSSQLSERVER"' in text


def test_write_configuration_file_keeps_secrets_on_command_line(tmp_path: Path):
    path = tmp_path / "conf" / "ConfigurationFile.ini"
    command = write_configuration_file(_args(), instance_name="MSSQLSERVER", path=path)

    text = path.read_text()
    assert 'ACTION="Install"' in text
    assert 'SQLSYSADMINACCOUNTS="CORP\\installer"' in text
    assert "Sup3rSecret!" not in text
    assert "SAPWD" not in text
    assert "QUIET" not in text

    assert command.get("CONFIGURATIONFILE") == str(path)
    assert command.get("SAPWD") == "Sup3rSecret!"
    assert command.get("QUIET") is True
    assert "INSTANCENAME" not in command
