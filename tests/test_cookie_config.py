"""Tests for configuration cookie encryption, validation and loading."""

from __future__ import annotations

import base64
import json
from datetime import timedelta

import pytest

from conftest import TEST_EMAIL, TEST_KEY, make_config
from interview_api.errors import ConfigDecryptionError
from interview_api.main import create_app
from interview_api.utils import crypto
from interview_api.utils.auth import (
    COOKIE_NAME,
    decrypt_config,
    encrypt_config,
    get_config_summary,
    is_config_expired,
    validate_config,
)
from interview_api.utils.dates import now_utc, to_iso


def _tamper(token: str) -> str:
    raw = bytearray(base64.b64decode(token))
    raw[-17] ^= 0x80
    return base64.b64encode(bytes(raw)).decode("ascii")


def test_encrypt_decrypt_roundtrip():
    config = make_config()
    assert decrypt_config(encrypt_config(config, TEST_KEY), TEST_KEY) == config


def test_secrets_are_encrypted_inside_the_document():
    config = make_config()
    inner = json.loads(crypto.decrypt(encrypt_config(config, TEST_KEY), TEST_KEY))

    assert inner["email"] == TEST_EMAIL
    assert inner["password"] != config["password"]
    assert inner["apiKey"] != config["apiKey"]
    assert crypto.decrypt(inner["apiKey"], TEST_KEY) == config["apiKey"]


@pytest.mark.parametrize("token", ["invalid-cookie", "", "Zm9vYmFy"])
def test_garbage_tokens_raise_config_decryption_error(token):
    with pytest.raises(ConfigDecryptionError):
        decrypt_config(token, TEST_KEY)


def test_tampered_token_raises_config_decryption_error():
    token = encrypt_config(make_config(), TEST_KEY)
    with pytest.raises(ConfigDecryptionError):
        decrypt_config(_tamper(token), TEST_KEY)


def test_non_object_document_is_rejected():
    with pytest.raises(ConfigDecryptionError):
        decrypt_config(crypto.encrypt("[1, 2, 3]", TEST_KEY), TEST_KEY)


def test_validate_config_accepts_complete_config():
    assert validate_config(make_config())


@pytest.mark.parametrize(
    "overrides",
    [
        {"provider": "mistral"},
        {"email": ""},
        {"apiKey": None},
        {"setupComplete": "yes"},
        {"createdAt": 12345},
    ],
)
def test_validate_config_rejects_bad_fields(overrides):
    assert not validate_config(make_config(**overrides))


def test_validate_config_rejects_non_dict():
    assert not validate_config(["not", "a", "dict"])


@pytest.mark.parametrize("days, expired", [(29, False), (30, False), (31, True)])
def test_expiry_boundary(days, expired):
    now = now_utc()
    config = make_config(createdAt=to_iso(now - timedelta(days=days)))
    assert is_config_expired(config, now) is expired


def test_unparseable_created_at_counts_as_expired():
    assert is_config_expired(make_config(createdAt="yesterday"))


def test_summary_omits_secrets():
    summary = get_config_summary(make_config())
    assert "password" not in summary
    assert "apiKey" not in summary
    assert summary["email"] == TEST_EMAIL


def test_valid_cookie_is_loaded(client, configure):
    configure()
    body = client.get("/api/ai/status").get_json()

    assert body["source"] == "cookie"
    assert body["email"] == TEST_EMAIL
    assert "apiKey" not in body


@pytest.mark.parametrize(
    "cookie",
    [
        "invalid-cookie",
        _tamper(encrypt_config(make_config(), TEST_KEY)),
        encrypt_config(make_config(createdAt=to_iso(now_utc() - timedelta(days=31))), TEST_KEY),
        encrypt_config(make_config(provider="mistral"), TEST_KEY),
        encrypt_config(make_config(), "another-key-entirely"),
    ],
)
def test_unusable_cookie_leaves_request_unconfigured(client, cookie):
    client.set_cookie(COOKIE_NAME, cookie)
    response = client.get("/api/ai/status")

    assert response.status_code == 200
    assert response.get_json()["source"] == "environment"


def test_missing_server_key_rejects_every_cookie():
    app = create_app({"TESTING": True, "CONFIG_ENCRYPTION_KEY": None, "PROBLEM_COUNT": 50})
    client = app.test_client()
    client.set_cookie(COOKIE_NAME, encrypt_config(make_config(), TEST_KEY))

    assert client.get("/api/ai/status").get_json()["source"] == "environment"
