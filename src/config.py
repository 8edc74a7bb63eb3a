"""
Runtime configuration for the shift OCR relay.

Settings are read once at startup and passed explicitly to every component
that talks to Deputy or Gemini.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


DEFAULT_GEMINI_MODEL = 'gemini-1.5-flash'


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    deputy_base_url: str
    deputy_access_token: str
    gemini_model: str = DEFAULT_GEMINI_MODEL
    deputy_timeout: float = 30.0
    deputy_company_id: int = 1
    deputy_location_id: int = 1
    port: int = 8000
    max_upload_mb: int = 5

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from. When omitted, a .env file is loaded into
             the process environment and os.environ is used.

    Returns:
        Immutable Settings instance

    Raises:
        ConfigError: If a required variable is missing or a number is malformed
    """
    if env is None:
        load_dotenv()
        env = os.environ

    google_api_key = env.get('GOOGLE_API_KEY') or env.get('GEMINI_API_KEY')
    deputy_base_url = env.get('DEPUTY_BASE_URL')
    deputy_access_token = env.get('DEPUTY_ACCESS_TOKEN')

    missing = []
    if not google_api_key:
        missing.append('GOOGLE_API_KEY')
    if not deputy_base_url:
        missing.append('DEPUTY_BASE_URL')
    if not deputy_access_token:
        missing.append('DEPUTY_ACCESS_TOKEN')
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        google_api_key=google_api_key,
        deputy_base_url=deputy_base_url.rstrip('/'),
        deputy_access_token=deputy_access_token,
        gemini_model=env.get('GEMINI_MODEL') or DEFAULT_GEMINI_MODEL,
        deputy_timeout=_read_number(env, 'DEPUTY_TIMEOUT', 30.0, float),
        deputy_company_id=_read_number(env, 'DEPUTY_COMPANY_ID', 1, int),
        deputy_location_id=_read_number(env, 'DEPUTY_LOCATION_ID', 1, int),
        port=_read_number(env, 'PORT', 8000, int),
        max_upload_mb=_read_number(env, 'MAX_UPLOAD_MB', 5, int),
    )
