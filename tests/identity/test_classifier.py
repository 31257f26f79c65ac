from sqlconverge.config.models import ServiceIdentity
from sqlconverge.identity.classifier import (
    IdentityKind,
    ServiceType,
    classify,
    service_account_arguments,
)


def _keys(args):
    return {a.key: a.value for a in args}


def test_builtin_system_account_has_no_password():
    args = _keys(service_account_arguments(ServiceIdentity(username="NT AUTHORITY\\SYSTEM"), ServiceType.DATABASE_ENGINE))
    assert args == {"SQLSVCACCOUNT": "NT AUTHORITY\\SYSTEM"}


def test_builtin_account_without_authority_is_qualified():
    c = classify(ServiceIdentity(username="NetworkService", password="ignored"))
    assert c.kind is IdentityKind.BUILTIN
    assert c.account == "NT AUTHORITY\\NetworkService"
    assert c.password is None


def test_virtual_service_account():
    c = classify(ServiceIdentity(username="nt service\\MSSQLSERVER"))
    assert c.kind is IdentityKind.VIRTUAL
    assert c.account == "NT SERVICE\\MSSQLSERVER"
    assert _keys(c.arguments(ServiceType.AGENT)) == {"AGTSVCACCOUNT": "NT SERVICE\\MSSQLSERVER"}


def test_managed_account_is_passed_literally():
    args = service_account_arguments(ServiceIdentity(username="svc_account$"), ServiceType.REPORTING)
    assert _keys(args) == {"RSSVCACCOUNT": "svc_account$"}


def test_domain_account_carries_password_marked_secret():
    args = service_account_arguments(
        ServiceIdentity(username="CORP\\sqlsvc", password="S3cr3t!"),
        ServiceType.DATABASE_ENGINE,
    )
    assert _keys(args) == {"SQLSVCACCOUNT": "CORP\\sqlsvc", "SQLSVCPASSWORD": "S3cr3t!"}
    password = next(a for a in args if a.key == "SQLSVCPASSWORD")
    assert password.secret
    assert "S3cr3t!" not in password.render(redact=True)
