"""API key lookup and storage.

Resolution order: explicit value, config ``openai.api_key``, the
``OPENAI_API_KEY`` environment variable, then the system keyring.
A config value of ``"keyring"`` means "skip straight to the keyring".
"""

from __future__ import annotations

import logging
import os

log = logging.getLogger(__name__)

KEYRING_SERVICE = "aipolish"
KEYRING_USER = "openai_api_key"
ENV_VAR = "OPENAI_API_KEY"


class CredentialStoreError(Exception):
    """The system keyring could not be written."""


def get_keyring_key() -> str | None:
    """Retrieve the API key from the system keyring."""
    try:
        import keyring

        return keyring.get_password(KEYRING_SERVICE, KEYRING_USER)
    except Exception:
        log.debug("Keyring lookup failed", exc_info=True)
        return None


def resolve_api_key(config: dict | None = None, explicit: str | None = None) -> tuple[str | None, str]:
    """Find an API key and report where it came from.

    Returns:
        (key, source) where source is one of 'option', 'config', 'env',
        'keyring', or 'none'.
    """
    if explicit:
        return explicit, "option"

    configured = ((config or {}).get("openai") or {}).get("api_key")
    if configured and configured != "keyring":
        return str(configured), "config"

    env_key = os.environ.get(ENV_VAR)
    if env_key:
        return env_key, "env"

    stored = get_keyring_key()
    if stored:
        return stored, "keyring"

    return None, "none"


def store_api_key(api_key: str) -> None:
    """Persist the API key in the system keyring."""
    try:
        import keyring

        keyring.set_password(KEYRING_SERVICE, KEYRING_USER, api_key)
    except Exception as e:
        raise CredentialStoreError(f"Could not save API key to keyring: {e}") from e
    log.info("API key stored in keyring (service=%s)", KEYRING_SERVICE)


def delete_api_key() -> bool:
    """Remove the stored API key. Returns False if none was stored."""
    try:
        import keyring
        from keyring.errors import PasswordDeleteError

        try:
            keyring.delete_password(KEYRING_SERVICE, KEYRING_USER)
        except PasswordDeleteError:
            return False
    except Exception as e:
        raise CredentialStoreError(f"Could not remove API key from keyring: {e}") from e
    return True
