"""Tests for the data quality checks."""

import pytest
import pandas as pd

from vancouver_accidents.quality.checks import (
    QualityCheckError,
    check_facet_join,
    check_non_negative,
    check_not_empty,
    check_unique_ids,
    check_victims_imply_casualty,
    inconsistent_severity,
    run_all_checks,
)
from vancouver_accidents.store.records import RecordStore


def test_check_not_empty_passes():
    df = pd.DataFrame({"id": [1, 2]})
    check_not_empty(df, "test")


def test_check_not_empty_fails():
    df = pd.DataFrame({"id": []})
    with pytest.raises(QualityCheckError, match="is empty"):
        check_not_empty(df, "test")


def test_check_non_negative_passes():
    df = pd.DataFrame({"total_victims": [0, 1, 4]})
    check_non_negative(df, ["total_victims"], "test")


def test_check_non_negative_fails():
    df = pd.DataFrame({"total_victims": [1, -5, 3]})
    with pytest.raises(QualityCheckError, match="negative"):
        check_non_negative(df, ["total_victims"], "test")


def test_check_unique_ids_passes():
    df = pd.DataFrame({"id": [1, 2, 3]})
    check_unique_ids(df, "test")


def test_check_unique_ids_fails():
    df = pd.DataFrame({"id": [1, 2, 1]})
    with pytest.raises(QualityCheckError, match="duplicate"):
        check_unique_ids(df, "test")


def test_victims_imply_casualty_on_clean_snapshot(store):
    check_victims_imply_casualty(store)
    assert inconsistent_severity(store).empty


def test_victims_imply_casualty_fails(facets):
    tags = facets["tags"].copy()
    tags.loc[tags["id"] == 5, "crash_severity"] = "PROPERTY DAMAGE"
    store = RecordStore({**facets, "tags": tags})

    with pytest.raises(QualityCheckError, match="victims"):
        check_victims_imply_casualty(store)
    assert inconsistent_severity(store)["id"].tolist() == [5]


def test_every_victim_row_is_a_casualty(store):
    df = store.frame(["total_victims", "crash_severity"])
    with_victims = df[df["total_victims"] > 0]
    assert (with_victims["crash_severity"] == "CASUALTY CRASH").all()


def test_facet_join_gap_is_reported_not_raised(facets):
    times = facets["times"][facets["times"]["id"] != 7]
    store = RecordStore({**facets, "times": times})

    report = check_facet_join(store)
    assert not report.complete
    assert report.missing["times"] == frozenset({7})
    assert report.incomplete_ids == frozenset({7})


def test_run_all_checks_returns_join_report(store):
    report = run_all_checks(store)
    assert report.complete
    assert report.total_ids == 10
