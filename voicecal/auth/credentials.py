# voicecal/auth/credentials.py
import json
import logging
from typing import Any, Dict, Optional

from google.oauth2 import service_account

logger = logging.getLogger(__name__)

REQUIRED_KEY_FIELDS = ("client_email", "private_key", "token_uri")


class CredentialsError(ValueError):
    """Service-account material is missing or cannot be parsed."""


def parse_service_account_info(raw_key: Optional[str] = None, key_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Reads the service-account JSON either from an inline string or from a file.

    Args:
        raw_key: JSON content of the key (GOOGLE_SERVICE_ACCOUNT_KEY).
        key_file: Path to the key file (GOOGLE_SERVICE_ACCOUNT_FILE), used when raw_key is empty.

    Raises:
        CredentialsError: if neither source is configured or the JSON is invalid.
    """
    if raw_key:
        source = "GOOGLE_SERVICE_ACCOUNT_KEY"
        content = raw_key
    elif key_file:
        source = key_file
        try:
            with open(key_file, "r", encoding="utf-8") as fh:
                content = fh.read()
        except OSError as e:
            raise CredentialsError(f"Cannot read service account file {key_file}: {e}") from e
    else:
        raise CredentialsError("GOOGLE_SERVICE_ACCOUNT_KEY environment variable not set")

    try:
        info = json.loads(content)
    except json.JSONDecodeError as e:
        raise CredentialsError(f"Service account key from {source} is not valid JSON: {e.msg}") from e

    if not isinstance(info, dict):
        raise CredentialsError(f"Service account key from {source} must be a JSON object")

    missing = [field for field in REQUIRED_KEY_FIELDS if not info.get(field)]
    if missing:
        raise CredentialsError(f"Service account key is missing fields: {', '.join(missing)}")

    return info


def load_service_account_credentials(
    scopes: list[str],
    raw_key: Optional[str] = None,
    key_file: Optional[str] = None,
) -> service_account.Credentials:
    """Builds scoped service-account credentials. Private key material is never logged."""
    info = parse_service_account_info(raw_key=raw_key, key_file=key_file)
    logger.info(f"Service account: {info.get('client_email')}")
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=scopes)
    except ValueError as e:
        # google-auth бросает ValueError на битый private_key
        raise CredentialsError(f"Service account key could not be loaded: {e}") from e
