"""Environment configuration."""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from webinar_admin.utils.exceptions import ConfigurationError

RECOGNIZED_KEYS = {"ADMIN_EMAIL", "ADMIN_PASSWORD", "DATABASE_URL", "SERVICE_ACCOUNT_KEY"}
DEFAULT_DATABASE_PATH = "data/webinar.json"

_ENV_LOADED = False
_ENV_LOCK = Lock()


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    admin_email: str
    database_url: str
    service_account_key: Optional[str] = None

    @property
    def database_path(self) -> str:
        """Filesystem path of the document database."""
        return database_path_from_url(self.database_url)

    def service_account(self) -> Dict[str, Any]:
        """
        Parse the service-account credential blob.

        Raises:
            ConfigurationError: If the key is missing or not a JSON object
        """
        if not self.service_account_key:
            raise ConfigurationError("SERVICE_ACCOUNT_KEY is not set")
        try:
            credential = json.loads(self.service_account_key)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"SERVICE_ACCOUNT_KEY is not valid JSON: {e.msg}") from e
        if not isinstance(credential, dict) or not credential.get("client_email"):
            raise ConfigurationError("SERVICE_ACCOUNT_KEY must contain a client_email")
        return credential


def load_env_file(env_path: Path = Path(".env")) -> None:
    """Load recognized keys from a .env file once, without overriding os.environ."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in RECOGNIZED_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def database_path_from_url(url: str) -> str:
    """Accept ``file://path``, ``file:path`` or a bare path."""
    if url.startswith("file://"):
        return url[len("file://"):]
    if url.startswith("file:"):
        return url[len("file:"):]
    return url


def get_settings() -> Settings:
    """Read settings from the environment (and .env on first call)."""
    load_env_file()

    return Settings(
        admin_email=os.getenv("ADMIN_EMAIL", "").strip(),
        database_url=os.getenv("DATABASE_URL", "") or DEFAULT_DATABASE_PATH,
        service_account_key=os.getenv("SERVICE_ACCOUNT_KEY") or None,
    )
