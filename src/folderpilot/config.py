"""Summary: Application configuration for FolderPilot.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from dataclasses import dataclass


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for the classifier and its API.

    Importance: Ensures all services derive settings from a single source of truth.
    Alternatives: Store settings in a shared config file and parse at startup.
    """

    snapshot_path: str
    classification_enabled: bool = False
    api_key: str = ""
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps all variables defined in config defaults while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        return AppConfig(
            snapshot_path=os.getenv("FOLDERPILOT_SNAPSHOT_PATH", defaults["snapshot_path"]),
            classification_enabled=parse_bool(
                os.getenv("FOLDERPILOT_CLASSIFICATION", defaults["classification_enabled"])
            ),
            api_key=os.getenv("FOLDERPILOT_API_KEY", defaults["api_key"]),
            log_level=os.getenv("FOLDERPILOT_LOG_LEVEL", defaults["log_level"]).upper(),
        )


def parse_bool(value: str | bool) -> bool:
    """Interpret common truthy strings such as ``true`` or ``1``."""

    if isinstance(value, bool):
        return value
    return value.strip().lower() in _TRUE_VALUES


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON.

    Importance: Ensures all variables exist in a single config file.
    Alternatives: Inline defaults in the AppConfig initializer.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps secrets out of code while supporting local workflows.
    Alternatives: Use python-dotenv or OS-specific secret stores.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        os.environ.setdefault(key.strip(), value)
