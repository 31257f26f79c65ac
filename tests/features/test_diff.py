import pytest

from sqlconverge.errors import UnsupportedFeatureError
from sqlconverge.features.diff import check_supported, missing_features


def test_diff_returns_features_not_installed():
    assert missing_features(["SQLENGINE", "FULLTEXT"], [], 13) == ["SQLENGINE", "FULLTEXT"]
    assert missing_features(["SQLENGINE", "FULLTEXT"], ["SQLENGINE"], 13) == ["FULLTEXT"]


def test_diff_is_case_insensitive():
    assert missing_features(["sqlengine", "FullText"], ["SQLEngine"], 14) == ["FULLTEXT"]


def test_diff_never_contains_installed_feature():
    current = ["SQLENGINE", "RS", "IS"]
    diff = missing_features(["SQLENGINE", "AS", "RS", "FULLTEXT"], current, 14)
    assert not set(diff) & set(current)


def test_diff_is_idempotent():
    current = ["SQLENGINE"]
    diff = missing_features(["SQLENGINE", "FULLTEXT", "AS"], current, 13)
    again = missing_features(diff + current, current, 13)
    assert again == diff


def test_management_tools_rejected_on_version_13():
    with pytest.raises(UnsupportedFeatureError) as exc:
        missing_features(["SSMS"], [], 13)
    assert exc.value.feature == "SSMS"
    assert exc.value.version == 13


def test_unsupported_feature_checked_even_when_installed():
    # ADV_SSMS is already there, the gate still applies before any diffing
    with pytest.raises(UnsupportedFeatureError):
        missing_features(["SQLENGINE", "adv_ssms"], ["SQLENGINE", "ADV_SSMS"], 13)


def test_management_tools_allowed_on_older_versions():
    assert missing_features(["SSMS", "ADV_SSMS"], [], 12) == ["SSMS", "ADV_SSMS"]
    check_supported(["SSMS"], 11)
