"""Runtime settings read from the environment (and a project-level .env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load .env from the project root regardless of working directory
load_dotenv(PROJECT_ROOT / ".env")

SOURCES = ("files", "database")
FILE_FORMATS = ("csv", "parquet")


@dataclass(frozen=True)
class Settings:
    source: str
    data_dir: Path
    output_dir: Path
    file_format: str
    save_to_database: bool


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else PROJECT_ROOT / p


def get_settings() -> Settings:
    source = os.getenv("ACCIDENTS_SOURCE", "files").lower()
    if source not in SOURCES:
        raise ValueError(f"ACCIDENTS_SOURCE must be one of {SOURCES}, got {source!r}")

    file_format = os.getenv("ACCIDENTS_FILE_FORMAT", "csv").lower()
    if file_format not in FILE_FORMATS:
        raise ValueError(f"ACCIDENTS_FILE_FORMAT must be one of {FILE_FORMATS}, got {file_format!r}")

    return Settings(
        source=source,
        data_dir=_resolve(os.getenv("ACCIDENTS_DATA_DIR", "data/raw")),
        output_dir=_resolve(os.getenv("ACCIDENTS_OUTPUT_DIR", "data/reports")),
        file_format=file_format,
        save_to_database=os.getenv("ACCIDENTS_SAVE_TO_DATABASE", "false").lower() in ("1", "true", "yes"),
    )
