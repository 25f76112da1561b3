"""Unit tests for password hashing, token lifetimes and log redaction."""

import pytest

from src.storefront.core.security import (
    DEFAULT_EXPIRATION_SECONDS,
    REDACTED,
    generate_correlation_id,
    hash_password,
    parse_expiration_to_seconds,
    sanitize_body,
    sanitize_headers,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_verifies_against_original_password(self):
        hashed = hash_password("Secret123", rounds=4)

        assert hashed != "Secret123"
        assert hashed.startswith("$2")
        assert verify_password("Secret123", hashed)

    def test_wrong_password_does_not_verify(self):
        hashed = hash_password("Secret123", rounds=4)

        assert not verify_password("secret123", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("Secret123", rounds=4) != hash_password("Secret123", rounds=4)

    def test_malformed_hash_never_matches(self):
        assert verify_password("Secret123", "not-a-bcrypt-hash") is False

    def test_only_first_72_bytes_are_significant(self):
        """bcrypt ignores everything past 72 bytes; long passwords must not error."""
        base = "A1" * 36
        hashed = hash_password(base + "tail-one", rounds=4)

        assert verify_password(base + "tail-two", hashed)

    def test_configured_rounds_are_used_by_default(self):
        # The test environment configures a cost of 4
        assert hash_password("Secret123").startswith("$2b$04$")


class TestParseExpiration:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("30s", 30), ("15m", 900), ("1h", 3600), ("7d", 604800)],
    )
    def test_supported_units(self, value, expected):
        assert parse_expiration_to_seconds(value) == expected

    @pytest.mark.parametrize("value", ["", "15", "15w", "m15", "abc"])
    def test_unparseable_values_fall_back_to_default(self, value):
        assert parse_expiration_to_seconds(value) == DEFAULT_EXPIRATION_SECONDS


class TestSanitizeBody:
    def test_redacts_sensitive_keys_case_insensitively(self):
        body = {"email": "a@b.com", "Password": "hunter2", "refreshToken": "abc"}

        assert sanitize_body(body) == {
            "email": "a@b.com",
            "Password": REDACTED,
            "refreshToken": REDACTED,
        }

    def test_redacts_nested_values_and_lists(self):
        body = {
            "user": {"profile": {"ssn": "123-45-6789", "name": "Ann"}},
            "cards": [{"cardNumber": "4111", "label": "main"}],
        }

        sanitized = sanitize_body(body)

        assert sanitized["user"]["profile"] == {"ssn": REDACTED, "name": "Ann"}
        assert sanitized["cards"] == [{"cardNumber": REDACTED, "label": "main"}]

    def test_does_not_modify_the_original(self):
        body = {"password": "hunter2"}

        sanitize_body(body)

        assert body == {"password": "hunter2"}

    def test_scalars_pass_through(self):
        assert sanitize_body("plain") == "plain"
        assert sanitize_body(None) is None

    def test_custom_field_list(self):
        assert sanitize_body({"pin": "1234", "password": "x"}, ["pin"]) == {
            "pin": REDACTED,
            "password": "x",
        }


class TestSanitizeHeaders:
    def test_redacts_credentials_and_cookies(self):
        headers = {
            "Authorization": "Bearer abc",
            "Cookie": "session=1",
            "Accept": "application/json",
        }

        assert sanitize_headers(headers) == {
            "Authorization": REDACTED,
            "Cookie": REDACTED,
            "Accept": "application/json",
        }


def test_correlation_ids_are_unique_uuids():
    first, second = generate_correlation_id(), generate_correlation_id()

    assert first != second
    assert len(first) == 36
