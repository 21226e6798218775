"""Column layout of the four accident facets and the derived dimensions."""

import pandas as pd

FACETS = ("locations", "times", "tags", "descriptions")

TAG_FLAGS = (
    "animal",
    "cyclist",
    "heavy_vehicle",
    "intersection_crash",
    "motorcycle",
    "parked_vehicle",
    "parking_lot",
    "pedestrian",
    "mid_block",
)

CASUALTY_CRASH = "CASUALTY CRASH"
PROPERTY_DAMAGE = "PROPERTY DAMAGE"

FACET_COLUMNS: dict[str, tuple[str, ...]] = {
    "locations": (
        "street_name",
        "cross_street",
        "full_location",
        "neighborhood",
        "latitude",
        "longitude",
    ),
    "times": ("time_of_day", "day_of_week", "month_of_year", "year"),
    "tags": TAG_FLAGS + ("crash_severity",),
    "descriptions": ("crash_configuration", "total_crashes", "total_victims"),
}

COLUMN_FACET = {col: facet for facet, cols in FACET_COLUMNS.items() for col in cols}

TIME_BUCKETS = (
    "00:00-02:59",
    "03:00-05:59",
    "06:00-08:59",
    "09:00-11:59",
    "12:00-14:59",
    "15:00-17:59",
    "18:00-20:59",
    "21:00-23:59",
)
WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY")
WEEKEND = ("SATURDAY", "SUNDAY")
DAYS = WEEKDAYS + WEEKEND
MONTHS = (
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
)
YEARS = (2017, 2018, 2019, 2020, 2021)

NATURAL_ORDER: dict[str, tuple] = {
    "time_of_day": TIME_BUCKETS,
    "day_of_week": DAYS,
    "month_of_year": MONTHS,
    "year": YEARS,
}

# The snapshot covers Jan 2017 - Dec 2021; the pandemic period starts March 2020.
PRE_COVID = "pre_covid"
COVID = "covid"
PERIOD_MONTHS = {PRE_COVID: 38, COVID: 22}

VICTIM_BUCKETS = ("Property Only", "1 Victim", "2 or More Victims")


def bucket_victims(total_victims: pd.Series) -> pd.Series:
    """Label each accident by how many people were hurt."""
    return total_victims.clip(upper=2).map(dict(enumerate(VICTIM_BUCKETS)))


def week_part(day_of_week: pd.Series) -> pd.Series:
    return day_of_week.isin(WEEKDAYS).map({True: "weekday", False: "weekend"})


def covid_period(df: pd.DataFrame) -> pd.Series:
    month_index = df["month_of_year"].map({m: i for i, m in enumerate(MONTHS, start=1)})
    after_start = (df["year"] > 2020) | ((df["year"] == 2020) & (month_index >= 3))
    return after_start.map({True: COVID, False: PRE_COVID})


def street_base(street_name: pd.Series) -> pd.Series:
    """Street name without its East/West prefix (E BROADWAY, W BROADWAY -> BROADWAY)."""
    return street_name.str.replace(r"^[EW]\s+", "", regex=True)


# name -> (source columns, function of the joined frame)
DERIVED_COLUMNS = {
    "victim_bucket": (("total_victims",), lambda df: bucket_victims(df["total_victims"])),
    "multi_crash": (("total_crashes",), lambda df: df["total_crashes"] > 1),
    "has_victims": (("total_victims",), lambda df: df["total_victims"] > 0),
    "week_part": (("day_of_week",), lambda df: week_part(df["day_of_week"])),
    "covid_period": (("month_of_year", "year"), covid_period),
    "at_intersection": (("cross_street",), lambda df: df["cross_street"] != ""),
    "street_base": (("street_name",), lambda df: street_base(df["street_name"])),
}
