"""Read the four accident facets from flat files or the database and decode them."""

import logging
from pathlib import Path

import pandas as pd
from sqlalchemy import select
from sqlalchemy.engine import Engine

from vancouver_accidents.config.settings import Settings
from vancouver_accidents.database.connection import get_engine
from vancouver_accidents.database.models import FACET_MODELS
from vancouver_accidents.store.schema import FACET_COLUMNS, FACETS, TAG_FLAGS

logger = logging.getLogger(__name__)

YES_NO = {"YES": True, "NO": False}


class FacetFormatError(ValueError):
    pass


def facet_path(data_dir: Path, facet: str, file_format: str = "csv") -> Path:
    return Path(data_dir) / f"{facet}.{file_format}"


def read_facet_file(path: Path) -> pd.DataFrame:
    """Load one facet from a CSV or Parquet file."""
    path = Path(path)
    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
    elif path.suffix == ".csv":
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported facet file type: {path}")
    logger.info("Loaded %d rows from %s", len(df), path)
    return df


def read_facet_table(facet: str, engine: Engine) -> pd.DataFrame:
    """Load one facet table through its ORM mapping."""
    model = FACET_MODELS[facet]
    with engine.connect() as conn:
        df = pd.read_sql(select(model.__table__), conn)
    logger.info("Loaded %d rows from table %s", len(df), facet)
    return df


def clean_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case column names and strip whitespace from string columns."""
    df = df.rename(columns=lambda c: str(c).strip().lower())
    for col in df.columns:
        if pd.api.types.is_string_dtype(df[col]):
            df[col] = df[col].str.strip()
    return df


def decode_yes_no(values: pd.Series, name: str) -> pd.Series:
    if values.dtype == bool:
        return values
    decoded = values.astype(str).str.upper().map(YES_NO)
    unknown = decoded.isna().sum()
    if unknown:
        raise FacetFormatError(f"tags.{name} has {unknown} values that are not Yes/No")
    return decoded.astype(bool)


def decode_facet(facet: str, df: pd.DataFrame) -> pd.DataFrame:
    """Turn a raw facet table into the typed frame the record store works on."""
    if facet not in FACET_COLUMNS:
        raise KeyError(f"Unknown facet: {facet}")

    df = clean_columns(df)
    if "year_" in df.columns:
        df = df.rename(columns={"year_": "year"})

    expected = ["id", *FACET_COLUMNS[facet]]
    missing = [col for col in expected if col not in df.columns]
    if missing:
        raise FacetFormatError(f"{facet} is missing columns {missing}")
    df = df[expected].copy()
    df["id"] = df["id"].astype(int)

    if facet == "locations":
        df["cross_street"] = df["cross_street"].fillna("")
    elif facet == "tags":
        for flag in TAG_FLAGS:
            df[flag] = decode_yes_no(df[flag], flag)
        df["crash_severity"] = df["crash_severity"].str.upper()
    elif facet == "times":
        df["year"] = df["year"].astype(int)
        df["day_of_week"] = df["day_of_week"].str.upper()
        df["month_of_year"] = df["month_of_year"].str.upper()
    elif facet == "descriptions":
        df["total_crashes"] = df["total_crashes"].astype(int)
        df["total_victims"] = df["total_victims"].astype(int)

    logger.info("Decoded %s: %d rows", facet, len(df))
    return df.reset_index(drop=True)


def load_facets_from_files(data_dir: Path, file_format: str = "csv") -> dict[str, pd.DataFrame]:
    return {
        facet: decode_facet(facet, read_facet_file(facet_path(data_dir, facet, file_format)))
        for facet in FACETS
    }


def load_facets_from_database(engine: Engine | None = None) -> dict[str, pd.DataFrame]:
    engine = engine or get_engine()
    return {facet: decode_facet(facet, read_facet_table(facet, engine)) for facet in FACETS}


def load_facets(settings: Settings) -> dict[str, pd.DataFrame]:
    """Load every facet from the configured source."""
    if settings.source == "database":
        return load_facets_from_database()
    return load_facets_from_files(settings.data_dir, settings.file_format)
