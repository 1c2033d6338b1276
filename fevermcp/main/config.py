"""Startup configuration for the Fever MCP server.

The three connection values are read once from the environment (a ``.env``
file is honoured by ``main()`` through python-dotenv) and frozen into a
``FeverConfig`` that is handed to the client and the server factory.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Mapping, Optional

API_URL_VAR = "FRESHRSS_API_URL"
USERNAME_VAR = "FRESHRSS_USERNAME"
PASSWORD_VAR = "FRESHRSS_PASSWORD"


class ConfigError(ValueError):
    """Raised when a required startup value is missing."""
    pass


@dataclass(frozen=True)
class FeverConfig:
    api_url: str
    username: str
    password: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

    @property
    def api_key(self) -> str:
        """Fever account key: MD5 hex digest of ``username:password``."""
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return hashlib.md5(raw).hexdigest()

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/api/fever.php"

    def __repr__(self) -> str:
        return f"FeverConfig(api_url={self.api_url!r}, username={self.username!r})"


def load_config(environ: Optional[Mapping[str, str]] = None) -> FeverConfig:
    """Build a ``FeverConfig`` from *environ* (``os.environ`` by default).

    Raises ``ConfigError`` if any of the three variables is unset or empty.
    """
    env = os.environ if environ is None else environ
    api_url = env.get(API_URL_VAR)
    username = env.get(USERNAME_VAR)
    password = env.get(PASSWORD_VAR)
    if not api_url or not username or not password:
        raise ConfigError(
            f"{API_URL_VAR}, {USERNAME_VAR}, and {PASSWORD_VAR} "
            "environment variables are required"
        )
    return FeverConfig(api_url=api_url, username=username, password=password)
