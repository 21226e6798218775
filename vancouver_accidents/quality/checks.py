"""Read-only data quality checks for the accident snapshot."""

import logging

import pandas as pd

from vancouver_accidents.store.records import JoinReport, RecordStore
from vancouver_accidents.store.schema import CASUALTY_CRASH, FACETS, PROPERTY_DAMAGE

logger = logging.getLogger(__name__)


class QualityCheckError(Exception):
    pass


def check_not_empty(df: pd.DataFrame, name: str) -> None:
    """Verify a facet has rows."""
    if df.empty:
        raise QualityCheckError(f"{name} is empty")
    logger.info("PASS: %s has %d rows", name, len(df))


def check_unique_ids(df: pd.DataFrame, name: str) -> None:
    """Verify each accident id appears at most once in a facet."""
    duplicate_count = df["id"].duplicated().sum()
    if duplicate_count > 0:
        raise QualityCheckError(f"{name} has {duplicate_count} duplicate accident ids")
    logger.info("PASS: %s is unique on id", name)


def check_non_negative(df: pd.DataFrame, columns: list[str], name: str) -> None:
    """Verify count columns have no negative values."""
    for col in columns:
        negative_count = (df[col] < 0).sum()
        if negative_count > 0:
            raise QualityCheckError(f"{name}.{col} has {negative_count} negative values")
    logger.info("PASS: %s has no negatives in %s", name, columns)


def inconsistent_severity(store: RecordStore) -> pd.DataFrame:
    """Accidents with victims that are nonetheless tagged as property damage only."""
    df = store.frame(["total_victims", "crash_severity"])
    return df[(df["total_victims"] > 0) & (df["crash_severity"] == PROPERTY_DAMAGE)]


def check_victims_imply_casualty(store: RecordStore) -> None:
    """Verify every accident with a victim is tagged as a casualty crash."""
    bad = inconsistent_severity(store)
    if not bad.empty:
        raise QualityCheckError(
            f"{len(bad)} accidents have victims but are not tagged {CASUALTY_CRASH!r}"
        )
    logger.info("PASS: every accident with victims is a casualty crash")


def check_facet_join(store: RecordStore) -> JoinReport:
    """Report ids that do not join across all four facets.

    Gaps are not fatal: the affected ids only drop out of aggregates that
    need the facet they are missing from.
    """
    report = store.join_report()
    if report.complete:
        logger.info("PASS: all %d accident ids join across %s", report.total_ids, list(FACETS))
    else:
        logger.warning(
            "%d of %d accident ids are missing from at least one facet",
            len(report.incomplete_ids),
            report.total_ids,
        )
    return report


def run_all_checks(store: RecordStore) -> JoinReport:
    """Run all quality checks on the loaded snapshot."""
    for name in FACETS:
        df = store.facet(name)
        check_not_empty(df, name)
        check_unique_ids(df, name)

    check_non_negative(store.facet("descriptions"), ["total_crashes", "total_victims"], "descriptions")
    check_victims_imply_casualty(store)
    report = check_facet_join(store)

    logger.info("All quality checks passed!")
    return report
