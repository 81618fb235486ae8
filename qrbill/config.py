from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from qrbill.logger import configure_logging

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_IMAGE_FORMATS = {"PNG", "JPEG"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    logo_path: Path | None = None
    image_format: str = "PNG"

    @classmethod
    def from_env(cls) -> "Settings":
        log_level = os.getenv("QRBILL_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"QRBILL_LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")

        image_format = os.getenv("QRBILL_IMAGE_FORMAT", "PNG").strip().upper()
        if image_format not in _IMAGE_FORMATS:
            raise ValueError("QRBILL_IMAGE_FORMAT must be one of: JPEG, PNG")

        logo_path: Path | None = None
        logo_env = os.getenv("QRBILL_LOGO_PATH")
        if logo_env and logo_env.strip():
            logo_path = Path(logo_env.strip())
            if not logo_path.exists():
                raise ValueError(f"QRBILL_LOGO_PATH not found: {logo_path}")

        return cls(
            log_level=log_level,
            logo_path=logo_path,
            image_format=image_format,
        )


def load_dotenv(path: str | Path = ".env", *, override: bool = False) -> None:
    env_path = Path(path)
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8").splitlines():
        entry = line.strip()
        if entry.startswith("export "):
            entry = entry[len("export "):].lstrip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        key, value = entry.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if override:
            os.environ[key] = value
        else:
            os.environ.setdefault(key, value)


def load_settings(dotenv_path: str | Path = ".env") -> Settings:
    """Read `.env` and the QRBILL_* variables, then install JSON logging at the configured level."""
    load_dotenv(dotenv_path)
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return settings
