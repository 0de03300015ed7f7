"""Configuration cookie handling: encryption, validation and request gating.

The setup wizard stores the user's provider credentials in an encrypted
cookie. Every request decrypts it once in a ``before_request`` hook; handlers
that need credentials call :func:`require_config`.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, current_app, g, request
from pydantic import ValidationError

from interview_api.errors import ConfigDecryptionError, ConfigurationError, DecryptionError
from interview_api.schemas import validate_user_id
from interview_api.services.ai_provider import PROVIDER_BASE_URLS
from interview_api.utils import crypto
from interview_api.utils.dates import now_utc, parse_iso
from interview_api.utils.responses import error_response, validation_error_response

COOKIE_NAME = "ai-interview-config"
CONFIG_TTL_DAYS = 30
COOKIE_MAX_AGE_SECONDS = CONFIG_TTL_DAYS * 24 * 60 * 60

SUPPORTED_PROVIDERS = tuple(PROVIDER_BASE_URLS)

# Fields encrypted a second time inside the encrypted document.
SECRET_FIELDS = ("password", "apiKey")

_REQUIRED_STRINGS = ("email", "password", "model", "apiKey", "apiUrl")


def encrypt_config(config: Dict[str, Any], key: str) -> str:
    """Encrypt a configuration the same way the frontend does."""
    document = dict(config)
    for field in SECRET_FIELDS:
        document[field] = crypto.encrypt(str(document[field]), key)
    return crypto.encrypt(json.dumps(document), key)


def decrypt_config(token: str, key: str) -> Dict[str, Any]:
    """Reverse :func:`encrypt_config`.

    Raises:
        ConfigDecryptionError: if any layer fails to decrypt or parse.
    """
    try:
        document = json.loads(crypto.decrypt(token, key))
    except (DecryptionError, ValueError) as exc:
        raise ConfigDecryptionError("Failed to decrypt configuration") from exc

    if not isinstance(document, dict):
        raise ConfigDecryptionError("Configuration is not a JSON object")

    for field in SECRET_FIELDS:
        value = document.get(field)
        if not isinstance(value, str):
            raise ConfigDecryptionError(f"Configuration field '{field}' is missing")
        try:
            document[field] = crypto.decrypt(value, key)
        except DecryptionError as exc:
            raise ConfigDecryptionError(f"Failed to decrypt configuration field '{field}'") from exc
    return document


def validate_config(config: Any) -> bool:
    """Return True when ``config`` has every field with the right type."""
    if not isinstance(config, dict):
        return False
    for field in _REQUIRED_STRINGS:
        value = config.get(field)
        if not isinstance(value, str) or not value:
            return False
    return (
        config.get("provider") in SUPPORTED_PROVIDERS
        and isinstance(config.get("setupComplete"), bool)
        and isinstance(config.get("createdAt"), str)
    )


def is_config_expired(config: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    """A configuration expires once more than 30 whole days have elapsed."""
    try:
        created_at = parse_iso(config["createdAt"])
    except (KeyError, TypeError, ValueError):
        return True
    elapsed = (now or now_utc()) - created_at
    return elapsed.days > CONFIG_TTL_DAYS


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return the configuration without its secrets."""
    return {
        "email": config["email"],
        "provider": config["provider"],
        "model": config["model"],
        "apiUrl": config["apiUrl"],
        "setupComplete": config["setupComplete"],
        "createdAt": config["createdAt"],
    }


def set_config_cookie(response: Response, config: Dict[str, Any]) -> None:
    """Encrypt ``config`` and attach it to ``response`` as the config cookie."""
    key = current_app.config.get("CONFIG_ENCRYPTION_KEY")
    if not key:
        raise ConfigurationError("CONFIG_ENCRYPTION_KEY is not set")
    response.set_cookie(
        COOKIE_NAME,
        encrypt_config(config, key),
        max_age=COOKIE_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="Strict",
        secure=current_app.config.get("NODE_ENV") == "production",
    )


def clear_config_cookie(response: Response) -> None:
    """Expire the config cookie on the client."""
    response.delete_cookie(COOKIE_NAME, path="/", httponly=True, samesite="Strict")


def load_user_config() -> None:
    """Populate ``g.user_config`` and ``g.has_valid_config`` from the cookie.

    Never raises: every failure leaves the request unauthenticated.
    """
    g.user_config = None
    g.has_valid_config = False

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return

    key = current_app.config.get("CONFIG_ENCRYPTION_KEY")
    if not key:
        current_app.logger.warning("CONFIG_ENCRYPTION_KEY is not set; ignoring configuration cookie")
        return

    try:
        config = decrypt_config(token, key)
    except ConfigDecryptionError as exc:
        current_app.logger.warning("Configuration cookie rejected: %s", exc)
        return

    if not validate_config(config):
        current_app.logger.warning("Configuration cookie has missing or invalid fields")
        return

    if is_config_expired(config):
        current_app.logger.info("Configuration cookie for %s has expired", config.get("email"))
        return

    g.user_config = config
    g.has_valid_config = True
    current_app.logger.debug(
        "Valid configuration for provider %s, model %s", config["provider"], config["model"]
    )


def require_config() -> Tuple[Optional[Dict[str, Any]], Optional[Any]]:
    """Return the request's configuration or a 401 response asking for setup."""
    config = g.get("user_config")
    if not g.get("has_valid_config") or not config:
        return None, error_response(
            401,
            "CONFIGURATION_REQUIRED",
            "Please complete the setup wizard to configure your AI provider",
            redirectToSetup=True,
        )
    return config, None


def require_own_data(user_id: str, action: str) -> Tuple[Optional[Dict[str, Any]], Optional[Any]]:
    """Like :func:`require_config`, but also insist ``user_id`` is the configured email.

    ``action`` completes the 403 message, e.g. "access your own progress data".
    """
    config, error = require_config()
    if error is not None:
        return None, error

    try:
        requested = validate_user_id(user_id)
    except ValidationError:
        return None, validation_error_response(
            [{"field": "userId", "message": "Valid email required for userId"}]
        )

    # Email validation lower-cases the domain; mailbox case is ignored as well
    if requested.lower() != config["email"].lower():
        current_app.logger.info("Denied cross-user request for %s", request.path)
        return None, error_response(403, "ACCESS_DENIED", f"You can only {action}")
    return config, None


def register_config_loader(app: Flask) -> None:
    """Attach the before-request hook that decodes the configuration cookie."""

    @app.before_request
    def _load_config() -> None:
        load_user_config()
