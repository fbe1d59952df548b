from lockgate.security.validation import (
    ValidationFailure,
    collect_issues,
    validate_email,
    validate_password,
    validate_pin,
)


def test_validate_email():
    assert validate_email("  a@b.com ") == []

    missing = validate_email(" ")
    assert missing and missing[0].field == "email"

    malformed = validate_email("a@b")
    assert malformed and "Некорректный" in malformed[0].message


def test_validate_password_requires_value():
    assert validate_password("x") == []

    issues = validate_password("")
    assert issues and issues[0].field == "password"


def test_validate_pin_format():
    assert validate_pin("0420") == []
    assert validate_pin("123")[0].field == "pin"
    assert validate_pin("12a4")
    assert validate_pin("")


def test_collect_issues_merges_lists():
    a = validate_email("")
    b = validate_password("")
    combined = collect_issues(a, b)
    assert [issue.field for issue in combined] == ["email", "password"]


def test_validation_failure_carries_issues():
    issues = collect_issues(validate_email(""), validate_password(""))

    failure = ValidationFailure(issues)

    assert failure.issues == issues
    assert "Введите пароль." in str(failure)
