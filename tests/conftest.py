"""Shared fixtures: a ten-accident snapshot in the raw four-facet layout."""

import pandas as pd
import pytest

from vancouver_accidents.ingestion.facets import decode_facet
from vancouver_accidents.store.records import RecordStore
from vancouver_accidents.store.schema import FACETS, TAG_FLAGS

# id, neighborhood, street, cross street, full location,
# time of day, day, month, year, tags set to Yes, severity,
# configuration, total crashes, total victims
ACCIDENTS = [
    (1, "Downtown", "W GEORGIA ST", "BURRARD ST", "W GEORGIA ST & BURRARD ST",
     "15:00-17:59", "MONDAY", "JANUARY", 2018, {"cyclist", "intersection_crash"}, "CASUALTY CRASH",
     "REAR END", 2, 1),
    (2, "Downtown", "W GEORGIA ST", "BURRARD ST", "W GEORGIA ST & BURRARD ST",
     "15:00-17:59", "TUESDAY", "MARCH", 2020, {"cyclist", "intersection_crash"}, "CASUALTY CRASH",
     "SIDE IMPACT", 1, 2),
    (3, "Downtown", "W GEORGIA ST", "DENMAN ST", "W GEORGIA ST & DENMAN ST",
     "09:00-11:59", "SATURDAY", "JUNE", 2021, {"intersection_crash"}, "PROPERTY DAMAGE",
     "REAR END", 2, 0),
    (4, "Downtown", "GRANVILLE ST", None, "GRANVILLE ST",
     "12:00-14:59", "SUNDAY", "JULY", 2019, {"heavy_vehicle", "mid_block"}, "PROPERTY DAMAGE",
     "SINGLE VEHICLE", 1, 0),
    (5, "Strathcona", "E HASTINGS ST", "MAIN ST", "E HASTINGS ST & MAIN ST",
     "00:00-02:59", "MONDAY", "FEBRUARY", 2020, {"heavy_vehicle", "intersection_crash"}, "CASUALTY CRASH",
     "HEAD ON", 2, 3),
    (6, "Strathcona", "E HASTINGS ST", None, "E HASTINGS ST",
     "12:00-14:59", "FRIDAY", "APRIL", 2017, {"heavy_vehicle", "mid_block"}, "PROPERTY DAMAGE",
     "SIDE IMPACT", 2, 0),
    (7, "Strathcona", "PRIOR ST", None, "PRIOR ST",
     "12:00-14:59", "WEDNESDAY", "MAY", 2021, {"parked_vehicle"}, "PROPERTY DAMAGE",
     "REAR END", 1, 0),
    (8, "Kitsilano", "W BROADWAY", None, "W BROADWAY",
     "15:00-17:59", "THURSDAY", "AUGUST", 2018, {"cyclist", "mid_block"}, "CASUALTY CRASH",
     "SIDE IMPACT", 1, 1),
    (9, "Kitsilano", "W 4TH AVE", None, "W 4TH AVE",
     "18:00-20:59", "SATURDAY", "DECEMBER", 2020, {"pedestrian"}, "CASUALTY CRASH",
     "PEDESTRIAN INVOLVED", 1, 1),
    (10, "Mount Pleasant", "E BROADWAY", "MAIN ST", "E BROADWAY & MAIN ST",
     "06:00-08:59", "MONDAY", "OCTOBER", 2019, {"intersection_crash"}, "PROPERTY DAMAGE",
     "REAR END", 2, 0),
]


def build_raw_facets(accidents=ACCIDENTS) -> dict[str, pd.DataFrame]:
    locations, times, tags, descriptions = [], [], [], []
    for (acc_id, hood, street, cross, full, tod, day, month, year,
         flags, severity, config, crashes, victims) in accidents:
        locations.append({
            "id": acc_id, "street_name": street, "cross_street": cross, "full_location": full,
            "neighborhood": hood, "latitude": 49.28, "longitude": -123.12,
        })
        times.append({
            "id": acc_id, "time_of_day": tod, "day_of_week": day,
            "month_of_year": month, "year_": year,
        })
        tag_row = {"id": acc_id}
        tag_row.update({flag: "Yes" if flag in flags else "No" for flag in TAG_FLAGS})
        tag_row["crash_severity"] = severity
        tags.append(tag_row)
        descriptions.append({
            "id": acc_id, "crash_configuration": config,
            "total_crashes": crashes, "total_victims": victims,
        })
    return {
        "locations": pd.DataFrame(locations),
        "times": pd.DataFrame(times),
        "tags": pd.DataFrame(tags),
        "descriptions": pd.DataFrame(descriptions),
    }


@pytest.fixture
def raw_facets() -> dict[str, pd.DataFrame]:
    return build_raw_facets()


@pytest.fixture
def facets(raw_facets) -> dict[str, pd.DataFrame]:
    return {name: decode_facet(name, raw_facets[name]) for name in FACETS}


@pytest.fixture
def store(facets) -> RecordStore:
    return RecordStore.from_facets(facets)
