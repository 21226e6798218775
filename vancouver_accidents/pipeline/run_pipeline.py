"""Main pipeline orchestration: load → validate → report → save."""

import logging
import sys
from pathlib import Path

import pandas as pd
from sqlalchemy.engine import Engine

from vancouver_accidents.config.settings import Settings, get_settings
from vancouver_accidents.database.connection import get_engine
from vancouver_accidents.quality.checks import run_all_checks
from vancouver_accidents.reports.neighborhood import neighborhood_report
from vancouver_accidents.reports.questions import build_reports
from vancouver_accidents.store.records import RecordStore

logger = logging.getLogger(__name__)


def save_reports(
    reports: dict[str, pd.DataFrame], output_dir: Path, file_format: str = "csv"
) -> list[Path]:
    """Write one file per report into the output directory."""
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name, df in reports.items():
        path = output_dir / f"{name}.{file_format}"
        if file_format == "parquet":
            df.to_parquet(path, index=False)
        else:
            df.to_csv(path, index=False)
        logger.info("Saved %s (%d rows)", path, len(df))
        paths.append(path)
    return paths


def load_reports_to_db(reports: dict[str, pd.DataFrame], engine: Engine) -> None:
    """Replace the report_<name> tables with the freshly built reports."""
    for name, df in reports.items():
        df.to_sql(f"report_{name}", engine, if_exists="replace", index=False)
        logger.info("Loaded %d rows into report_%s", len(df), name)


def neighborhood_reports(store: RecordStore) -> dict[str, pd.DataFrame]:
    """Flatten the per-neighbourhood bundles into named reports."""
    names = sorted(store.facet("locations")["neighborhood"].unique())
    reports = {}
    for neighborhood in names:
        slug = neighborhood.lower().replace(" ", "_").replace("-", "_")
        for section, df in neighborhood_report(store, neighborhood).items():
            reports[f"neighborhood_{slug}_{section}"] = df
    return reports


def run(settings: Settings | None = None) -> dict[str, pd.DataFrame]:
    """Execute the full pipeline."""
    settings = settings or get_settings()
    logger.info("=== Starting accident report pipeline ===")

    # Step 1: Load
    logger.info("--- Step 1: Load facets (%s) ---", settings.source)
    store = RecordStore.load(settings)

    # Step 2: Validate
    logger.info("--- Step 2: Quality checks ---")
    join_report = run_all_checks(store)

    # Step 3: Report
    logger.info("--- Step 3: Build reports ---")
    reports = build_reports(store)
    reports.update(neighborhood_reports(store))
    if not join_report.complete:
        reports["incomplete_accidents"] = join_report.to_frame()

    # Step 4: Save
    logger.info("--- Step 4: Save reports ---")
    save_reports(reports, settings.output_dir, settings.file_format)
    if settings.save_to_database:
        load_reports_to_db(reports, get_engine())

    logger.info("=== Pipeline complete: %d reports ===", len(reports))
    return reports


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        run()
    except Exception:
        logger.exception("Pipeline failed")
        sys.exit(1)
