"""Tests for the record store and its facet joins."""

import pytest

from vancouver_accidents.store.records import RecordStore
from vancouver_accidents.store.schema import bucket_victims, covid_period, street_base


def test_store_counts_complete_accidents(store):
    assert len(store) == 10


def test_frame_joins_only_needed_facets(store):
    df = store.frame(["neighborhood"])
    assert "time_of_day" not in df.columns
    assert "total_victims" not in df.columns
    assert len(df) == 10


def test_frame_joins_across_facets(store):
    df = store.frame(["neighborhood", "time_of_day", "cyclist"])
    assert {"neighborhood", "time_of_day", "cyclist"} <= set(df.columns)
    assert len(df) == 10


def test_frame_adds_derived_columns(store):
    df = store.frame(["victim_bucket", "at_intersection"])
    assert df.loc[df["id"] == 5, "victim_bucket"].item() == "2 or More Victims"
    assert df["at_intersection"].sum() == 5


def test_frame_unknown_column(store):
    with pytest.raises(KeyError, match="weather"):
        store.frame(["weather"])


def test_store_requires_all_facets(facets):
    del facets["tags"]
    with pytest.raises(KeyError, match="tags"):
        RecordStore(facets)


def test_missing_facet_row_only_affects_joins_using_that_facet(facets):
    descriptions = facets["descriptions"][facets["descriptions"]["id"] != 10]
    store = RecordStore({**facets, "descriptions": descriptions})

    assert len(store) == 9
    assert len(store.frame(["neighborhood", "time_of_day"])) == 10
    assert len(store.frame(["neighborhood", "total_victims"])) == 9

    report = store.join_report()
    assert report.missing["descriptions"] == frozenset({10})
    assert report.missing["locations"] == frozenset()
    assert report.to_frame().to_dict("records") == [{"facet": "descriptions", "id": 10}]


def test_bucket_victims(store):
    df = store.facet("descriptions")
    buckets = bucket_victims(df["total_victims"])
    assert buckets.value_counts().to_dict() == {
        "Property Only": 5,
        "1 Victim": 3,
        "2 or More Victims": 2,
    }


def test_covid_period_starts_march_2020(store):
    df = store.facet("times")
    periods = dict(zip(df["id"], covid_period(df)))
    assert periods[5] == "pre_covid"  # February 2020
    assert periods[2] == "covid"  # March 2020
    assert periods[9] == "covid"


def test_street_base_merges_east_and_west(store):
    names = street_base(store.facet("locations")["street_name"])
    assert (names == "BROADWAY").sum() == 2
    assert (names == "GEORGIA ST").sum() == 3
