from __future__ import annotations

import pytest

from userapi.models import UserPayload
from userapi.validation import normalize_email, parse_user_payload, validate_user_payload


def _payload(**overrides):
    payload = {"name": "Grace Hopper", "email": "grace@example.com", "age": 85}
    payload.update(overrides)
    return payload


def test_valid_payload_returns_none() -> None:
    assert validate_user_payload(_payload()) is None


def test_reports_every_violated_field() -> None:
    errors = validate_user_payload(_payload(name="", age=200))

    assert errors is not None
    assert set(errors) == {"name", "age"}
    assert errors["name"] == ["The name field is required."]
    assert errors["age"] == ["The age field must be between 0 and 130."]


def test_missing_name_and_email_are_required() -> None:
    errors = validate_user_payload({"age": 30})

    assert errors == {
        "name": ["The name field is required."],
        "email": ["The email field is required."],
    }


@pytest.mark.parametrize("name", ["A", " B ", "x" * 101])
def test_name_length_is_checked_after_trimming(name: str) -> None:
    errors = validate_user_payload(_payload(name=name))

    assert errors is not None
    assert list(errors) == ["name"]


def test_name_at_bounds_is_accepted() -> None:
    assert validate_user_payload(_payload(name="  Al  ")) is None
    assert validate_user_payload(_payload(name="y" * 100)) is None


@pytest.mark.parametrize("email", ["not-an-email", "two@@example.com", "@example.com", "user@", "us er@example.com"])
def test_invalid_email_syntax(email: str) -> None:
    errors = validate_user_payload(_payload(email=email))

    assert errors == {"email": ["The email field is not a valid e-mail address."]}


def test_email_surrounding_whitespace_is_tolerated() -> None:
    assert validate_user_payload(_payload(email="  ADA@Example.com ")) is None


def test_email_length_limit() -> None:
    long_email = "a" * 195 + "@example.com"
    errors = validate_user_payload(_payload(email=long_email))

    assert errors == {"email": ["The email field must be at most 200 characters long."]}


def test_email_length_boundary() -> None:
    domain = "@example.com"
    at_limit = "a" * (200 - len(domain)) + domain
    over_limit = "a" * (201 - len(domain)) + domain

    assert len(at_limit) == 200
    assert validate_user_payload(_payload(email=at_limit)) is None
    assert validate_user_payload(_payload(email=over_limit)) == {
        "email": ["The email field must be at most 200 characters long."]
    }


@pytest.mark.parametrize("age", [-1, 131, 1000])
def test_age_out_of_range(age: int) -> None:
    errors = validate_user_payload(_payload(age=age))

    assert errors == {"age": ["The age field must be between 0 and 130."]}


@pytest.mark.parametrize("age", [0, 130])
def test_age_in_range(age) -> None:
    assert validate_user_payload(_payload(age=age)) is None


@pytest.mark.parametrize("age", ["30", 30.5, 28.0, True, None])
def test_age_must_be_an_integer(age) -> None:
    errors = validate_user_payload(_payload(age=age))

    assert errors == {"age": ["The age field must be an integer."]}


def test_age_defaults_to_zero_when_omitted() -> None:
    payload = {"name": "Baby", "email": "baby@example.com"}

    assert validate_user_payload(payload) is None
    assert parse_user_payload(payload).age == 0


@pytest.mark.parametrize("body", [None, [], "text", 12])
def test_non_object_body_is_rejected(body) -> None:
    assert validate_user_payload(body) == {"body": ["Request body must be a JSON object."]}


def test_non_string_fields_are_rejected() -> None:
    errors = validate_user_payload({"name": 12, "email": ["x@example.com"], "age": 5})

    assert errors == {
        "name": ["The name field must be a string."],
        "email": ["The email field must be a string."],
    }


def test_parse_user_payload_normalises_fields() -> None:
    parsed = parse_user_payload({"name": "  Ada Lovelace ", "email": " ADA@Example.com ", "age": 28})

    assert parsed == UserPayload(name="Ada Lovelace", email="ada@example.com", age=28)


def test_validation_does_not_mutate_payload() -> None:
    payload = _payload(email=" MiXeD@Example.com ")
    snapshot = dict(payload)

    validate_user_payload(payload)

    assert payload == snapshot


def test_normalize_email() -> None:
    assert normalize_email("  Someone@Example.COM\t") == "someone@example.com"
