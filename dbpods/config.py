# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# CONFIGURATION (Environment Overrides)
# -----------------------------------------------------------------------------
# Everything here comes from environment variables. There is no config file
# beyond an optional .env in the working directory.
#
# TEST_DATABASE_<DIALECT> points a test run at an existing database and
# skips Docker entirely for that dialect.
# -----------------------------------------------------------------------------

import os
from pathlib import Path

from dotenv import load_dotenv

from dbpods.domain.models import Dialect, get_spec


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""

    pass


def env_seconds(name: str, default: str) -> float:
    """Read a non-negative duration in seconds from the environment."""
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


# Retry policy defaults (seconds)
RETRY_CONFIG = {
    "interval": env_seconds("DBPODS_RETRY_INTERVAL", "5"),
    "max_duration": env_seconds("DBPODS_RETRY_TIMEOUT", "300"),
}

# Container runtime endpoint; None means docker.from_env()
DOCKER_CONFIG = {
    "base_url": os.getenv("DOCKER_HOST") or None,
    "label": "dbpods.resource",
}


def load_env_file(path: Path | str | None = None) -> bool:
    """
    Load a .env file without clobbering variables already set.

    Args:
        path: Explicit file; defaults to .env in the working directory.

    Returns:
        True if a file was found and loaded.
    """
    env_path = Path(path) if path else Path.cwd() / ".env"
    if not env_path.is_file():
        return False
    return load_dotenv(env_path, override=False)


def get_override(dialect: Dialect | str) -> str | None:
    """
    Return the override DSN for a dialect, or None when unset.

    Read at call time so tests (and .env loading) can change it. An empty
    value counts as unset.
    """
    value = os.getenv(get_spec(dialect).override_env, "")
    return value or None
