import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from google.oauth2 import service_account

from .config import Settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("type", "client_email", "private_key")
SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)


@dataclass(frozen=True)
class ServiceAccountConfig:
    """Parsed service account key, loaded once at startup and shared read-only."""

    info: Mapping[str, str]
    credentials: service_account.Credentials = field(repr=False, compare=False)
    scopes: tuple[str, ...] = SCOPES

    @property
    def client_email(self) -> str:
        return self.info["client_email"]


def _decode_key(encoded: str) -> dict:
    try:
        decoded = base64.b64decode(encoded.strip()).decode("utf-8")
        return json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ConfigurationError(
            "Failed to parse GOOGLE_SERVICE_ACCOUNT_KEY as JSON. Ensure the entire "
            "JSON content is correctly Base64 encoded."
        ) from e


def _read_key_file(path: str) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            return json.loads(f.read())
    except OSError as e:
        raise ConfigurationError(f"Cannot read service account file {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Service account file {path} is not valid JSON") from e


def load_service_account(settings: Settings) -> ServiceAccountConfig:
    '''
    Load service account credentials from GOOGLE_SERVICE_ACCOUNT_KEY
    (base64 encoded JSON) or, when unset, from the GOOGLE_CREDS_PATH file.
    Raises ConfigurationError if neither yields a usable key.
    '''
    if settings.GOOGLE_SERVICE_ACCOUNT_KEY:
        info = _decode_key(settings.GOOGLE_SERVICE_ACCOUNT_KEY)
    elif settings.GOOGLE_CREDS_PATH:
        info = _read_key_file(settings.GOOGLE_CREDS_PATH)
    else:
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_KEY environment variable is not set.")

    if not isinstance(info, dict):
        raise ConfigurationError("Service account key must be a JSON object.")

    missing = [key for key in REQUIRED_KEYS if not info.get(key)]
    if missing:
        raise ConfigurationError(f"Service account key is missing: {', '.join(missing)}")

    if info["type"] != "service_account":
        raise ConfigurationError(f"Unexpected credentials type {info['type']!r}, expected 'service_account'")

    try:
        credentials = service_account.Credentials.from_service_account_info(
            dict(info), scopes=list(SCOPES)
        )
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Service account private_key could not be loaded: {e}") from e

    logger.info("Loaded service account %s", info["client_email"])
    return ServiceAccountConfig(info=MappingProxyType(dict(info)), credentials=credentials)
