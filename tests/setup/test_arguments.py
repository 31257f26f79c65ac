import pytest

from sqlconverge.errors import ArgumentBuildError
from sqlconverge.setup.arguments import MASK, InstallerArgument, InstallerArguments


def test_list_values_render_sorted_and_quoted():
    arg = InstallerArgument("SQLSYSADMINACCOUNTS", ["CORP\\zed", "CORP\\amy"])
    assert arg.render() == '/SQLSYSADMINACCOUNTS="CORP\\amy" "CORP\\zed"'


def test_boolean_renders_quoted_literal():
    assert InstallerArgument("QUIET", True).render() == '/QUIET="True"'
    assert InstallerArgument("UPDATEENABLED", False).render() == '/UPDATEENABLED="False"'


def test_feature_list_is_unquoted_comma_joined():
    assert InstallerArgument("features", ["SQLENGINE", "FULLTEXT"]).render() == "/FEATURES=FULLTEXT,SQLENGINE"


def test_empty_values_are_omitted():
    args = InstallerArguments()
    args.add("INSTANCENAME", "MSSQLSERVER")
    args.add("SQLCOLLATION", "")
    args.add("FAILOVERCLUSTERDISKS", [])
    assert args.render() == '/INSTANCENAME="MSSQLSERVER"'


def test_keys_are_unique_case_insensitive():
    args = InstallerArguments()
    args.add("QUIET", True)
    with pytest.raises(ArgumentBuildError):
        args.add("quiet", True)


def test_redaction_masks_secrets_without_touching_real_values():
    args = InstallerArguments()
    args.add("SAPWD", "Sup3rSecret!", secret=True)
    args.add("INSTANCENAME", "MSSQLSERVER")

    redacted = args.redacted()
    assert "Sup3rSecret!" not in redacted
    assert f'/SAPWD="{MASK}"' in redacted
    assert '/SAPWD="Sup3rSecret!"' in args.render()
    assert args.get("sapwd") == "Sup3rSecret!"
    assert args.secrets() == ["Sup3rSecret!"]
