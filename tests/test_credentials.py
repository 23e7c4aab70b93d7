"""Tests for credentials and the credentials builder."""

import dataclasses

import pytest

from tinys3.credentials import Credentials


class TestCredentials:
    def test_anonymous(self):
        creds = Credentials.anonymous()
        assert creds.is_anonymous
        assert not creds.can_sign
        assert creds == Credentials()

    def test_static(self):
        creds = Credentials.from_static("ak", "sk")
        assert creds.access_key == "ak"
        assert creds.secret_key == "sk"
        assert creds.can_sign
        assert not creds.is_anonymous
        assert creds.token is None

    def test_frozen(self):
        creds = Credentials.from_static("ak", "sk")
        with pytest.raises(dataclasses.FrozenInstanceError):
            creds.access_key = "other"

    def test_repr_hides_secret(self):
        assert "sk-secret" not in repr(Credentials.from_static("ak", "sk-secret"))

    def test_token_prefers_session_token(self):
        creds = Credentials(session_token="session", security_token="security")
        assert creds.token == "session"
        assert Credentials(security_token="security").token == "security"

    def test_token_only_is_not_anonymous(self):
        assert not Credentials(session_token="t").is_anonymous


class TestCredentialsBuilder:
    def test_empty_builder_is_anonymous(self):
        assert Credentials.builder().build().is_anonymous

    def test_chained(self):
        creds = (
            Credentials.builder()
            .access_key("ak")
            .secret_key("sk")
            .session_token("st")
            .security_token("xt")
            .build()
        )
        assert creds == Credentials("ak", "sk", "st", "xt")

    def test_later_value_wins(self):
        creds = Credentials.builder().access_key("one").access_key("two").build()
        assert creds.access_key == "two"

    def test_access_key_only_cannot_sign(self):
        creds = Credentials.builder().access_key("ak").build()
        assert not creds.is_anonymous
        assert not creds.can_sign
