"""Neighbourhood-level accident reports for Vancouver.

Each function answers one question about the snapshot and returns a
DataFrame ready to be saved or charted. Percentages are rounded to two
decimals.
"""

import logging
from collections.abc import Callable, Sequence

import pandas as pd

from vancouver_accidents.aggregation import filters as f
from vancouver_accidents.aggregation.aggregate import (
    aggregate,
    average,
    in_natural_order,
    proportion,
    rank,
    with_share,
)
from vancouver_accidents.aggregation.compare import compare, compare_to_mean, relative_difference
from vancouver_accidents.quality.checks import inconsistent_severity
from vancouver_accidents.store.records import RecordStore
from vancouver_accidents.store.schema import (
    CASUALTY_CRASH,
    COVID,
    PERIOD_MONTHS,
    PRE_COVID,
    TAG_FLAGS,
    VICTIM_BUCKETS,
)

logger = logging.getLogger(__name__)

PCT_COLUMNS = ("pct", "pct_total", "subgroup_pct", "baseline_pct", "pp_diff", "pct_diff")


def round_pct(df: pd.DataFrame, digits: int = 2) -> pd.DataFrame:
    cols = [c for c in PCT_COLUMNS if c in df.columns]
    return df.assign(**{c: df[c].round(digits) for c in cols}) if cols else df


def _counts(agg: pd.DataFrame, by: Sequence[str]) -> pd.DataFrame:
    return agg[[*by, "count"]]


# --- Locations ---------------------------------------------------------------


def accidents_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    return round_pct(with_share(_counts(aggregate(store, "neighborhood"), ["neighborhood"])))


def accidents_by_street(store: RecordStore) -> pd.DataFrame:
    return _counts(aggregate(store, "street_name"), ["street_name"])


def accidents_by_street_base(store: RecordStore) -> pd.DataFrame:
    """Streets with their East/West halves added together (E/W BROADWAY -> BROADWAY)."""
    return _counts(aggregate(store, "street_base"), ["street_base"])


def accidents_by_street_and_neighborhood(
    store: RecordStore, neighborhood: str | None = None
) -> pd.DataFrame:
    where = f.eq("neighborhood", neighborhood) if neighborhood else None
    by = ["street_name", "neighborhood"]
    return _counts(aggregate(store, by, where=where), by)


def _intersection_filter(neighborhood: str | None, street: str | None) -> f.Filter:
    where = f.intersection()
    if neighborhood:
        where = where & f.eq("neighborhood", neighborhood)
    if street:
        where = where & f.contains("full_location", street)
    return where


def top_intersections(
    store: RecordStore, neighborhood: str | None = None, street: str | None = None
) -> pd.DataFrame:
    by = ["full_location", "neighborhood"]
    agg = aggregate(store, by, where=_intersection_filter(neighborhood, street))
    return _counts(agg, by)


def intersection_summary(
    store: RecordStore, neighborhood: str | None = None, street: str | None = None
) -> pd.DataFrame:
    """How many distinct intersections match, and how many accidents they had in total."""
    agg = aggregate(store, "full_location", where=_intersection_filter(neighborhood, street))
    return pd.DataFrame(
        {
            "number_of_intersections": [len(agg)],
            "total_number_of_accidents": [int(agg["count"].sum())],
        }
    )


def accidents_by_cross_street(store: RecordStore) -> pd.DataFrame:
    return _counts(aggregate(store, "cross_street"), ["cross_street"])


def intersections_on_cross_street(store: RecordStore, cross_street: str) -> pd.DataFrame:
    by = ["cross_street", "full_location", "neighborhood"]
    return _counts(aggregate(store, by, where=f.eq("cross_street", cross_street)), by)


def accidents_at_streets(store: RecordStore, *streets: str) -> pd.DataFrame:
    """Locations whose full description mentions every one of ``streets``."""
    if not streets:
        raise ValueError("At least one street is required")
    where = f.contains("full_location", streets[0])
    for street in streets[1:]:
        where = where & f.contains("full_location", street)
    by = ["cross_street", "full_location", "neighborhood"]
    return _counts(aggregate(store, by, where=where), by)


# --- Descriptions ------------------------------------------------------------


def accidents_by_victim_count(store: RecordStore) -> pd.DataFrame:
    agg = _counts(aggregate(store, "total_victims"), ["total_victims"])
    return agg.sort_values("total_victims").reset_index(drop=True)


def accidents_by_crash_count(store: RecordStore) -> pd.DataFrame:
    agg = _counts(aggregate(store, "total_crashes"), ["total_crashes"])
    return agg.sort_values("total_crashes").reset_index(drop=True)


def accidents_by_configuration(store: RecordStore) -> pd.DataFrame:
    return _counts(aggregate(store, "crash_configuration"), ["crash_configuration"])


def victims_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    agg = aggregate(store, "neighborhood")[["neighborhood", "count", "total_victims"]]
    return rank(agg, ["neighborhood"], value="total_victims")


def casualty_rate_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    """Share of each neighbourhood's accidents that had at least one victim."""
    return round_pct(proportion(store, "neighborhood", f.flag("has_victims")))


def victim_breakdown(store: RecordStore, neighborhood: str) -> pd.DataFrame:
    """Property-only / one victim / two or more victims for one neighbourhood."""
    agg = aggregate(store, "victim_bucket", where=f.eq("neighborhood", neighborhood))
    agg = with_share(_counts(agg, ["victim_bucket"]))
    order = {bucket: i for i, bucket in enumerate(VICTIM_BUCKETS)}
    agg = agg.sort_values("victim_bucket", key=lambda s: s.map(order)).reset_index(drop=True)
    return round_pct(agg)


def multi_crash_share_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    return round_pct(proportion(store, "neighborhood", f.flag("multi_crash")))


def multi_crash_share_by_location(
    store: RecordStore, min_count: int = 101, min_multi_crash: int = 1
) -> pd.DataFrame:
    """Locations where several vehicles tend to be involved, ignoring rarely seen locations."""
    agg = proportion(
        store, ["full_location", "neighborhood"], f.flag("multi_crash"), min_count=min_count
    )
    agg = agg[agg["matching"] >= min_multi_crash].reset_index(drop=True)
    return round_pct(agg)


def average_victims_by_configuration(store: RecordStore) -> pd.DataFrame:
    return average(store, "crash_configuration", "total_victims").round({"avg_total_victims": 3})


def average_victims_by_neighborhood(
    store: RecordStore, configurations: Sequence[str] = ("MULTIPLE IMPACTS", "HEAD ON")
) -> pd.DataFrame:
    agg = average(
        store, "neighborhood", "total_victims", where=f.isin("crash_configuration", configurations)
    )
    return agg.round({"avg_total_victims": 3})


def average_victims_by_location(
    store: RecordStore,
    neighborhood: str,
    configurations: Sequence[str] = ("MULTIPLE IMPACTS", "HEAD ON"),
) -> pd.DataFrame:
    where = f.eq("neighborhood", neighborhood) & f.isin("crash_configuration", configurations)
    return average(store, "full_location", "total_victims", where=where).round(
        {"avg_total_victims": 3}
    )


# --- Times -------------------------------------------------------------------


def accidents_by_time_of_day(store: RecordStore) -> pd.DataFrame:
    return _counts(aggregate(store, "time_of_day"), ["time_of_day"])


def neighborhoods_at_time(store: RecordStore, time_of_day: str) -> pd.DataFrame:
    agg = aggregate(store, "neighborhood", where=f.eq("time_of_day", time_of_day))
    return _counts(agg, ["neighborhood"])


def time_share_by_neighborhood(store: RecordStore, time_of_day: str) -> pd.DataFrame:
    return round_pct(proportion(store, "neighborhood", f.eq("time_of_day", time_of_day)))


def time_share_by_location(
    store: RecordStore, time_of_day: str, neighborhood: str, min_count: int = 11
) -> pd.DataFrame:
    agg = proportion(
        store,
        "full_location",
        f.eq("time_of_day", time_of_day),
        where=f.eq("neighborhood", neighborhood),
        min_count=min_count,
    )
    return round_pct(agg)


def accidents_by_day(store: RecordStore) -> pd.DataFrame:
    return _counts(aggregate(store, "day_of_week"), ["day_of_week"])


def weekday_share_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    agg = proportion(store, "neighborhood", f.eq("week_part", "weekday"))
    agg = agg.rename(columns={"pct": "weekday_pct", "matching": "weekday_count"})
    agg["weekend_pct"] = 100 - agg["weekday_pct"]
    return agg.round({"weekday_pct": 2, "weekend_pct": 2})


def vs_rest_of_city(
    store: RecordStore, by: str, neighborhood: str, where: f.Filter | None = None
) -> pd.DataFrame:
    inside = f.eq("neighborhood", neighborhood)
    outside = f.ne("neighborhood", neighborhood)
    if where is not None:
        inside, outside = inside & where, outside & where
    return compare(aggregate(store, by, where=inside), aggregate(store, by, where=outside), by)


def day_of_week_vs_city(store: RecordStore, neighborhood: str) -> pd.DataFrame:
    """A neighbourhood's weekday distribution against the rest of the city."""
    return round_pct(vs_rest_of_city(store, "day_of_week", neighborhood))


def accidents_by_month(store: RecordStore) -> pd.DataFrame:
    agg = _counts(aggregate(store, "month_of_year"), ["month_of_year"])
    return in_natural_order(agg, "month_of_year")


def accidents_by_year(store: RecordStore) -> pd.DataFrame:
    return in_natural_order(_counts(aggregate(store, "year"), ["year"]), "year")


def covid_change_by_neighborhood(store: RecordStore) -> pd.DataFrame:
    """Average accidents per month before and after March 2020, per neighbourhood."""
    agg = aggregate(store, ["neighborhood", "covid_period"])
    monthly = (
        agg.pivot(index="neighborhood", columns="covid_period", values="count")
        .reindex(columns=[COVID, PRE_COVID])
        .fillna(0)
    )
    out = pd.DataFrame(
        {
            "covid_count": monthly[COVID] / PERIOD_MONTHS[COVID],
            "pre_covid_count": monthly[PRE_COVID] / PERIOD_MONTHS[PRE_COVID],
        }
    ).rename_axis("neighborhood").reset_index()
    out["covid_difference"] = out["covid_count"] - out["pre_covid_count"]
    out["pct_diff"] = pd.array(
        [relative_difference(c, p) for c, p in zip(out["covid_count"], out["pre_covid_count"])],
        dtype="Float64",
    )
    out = round_pct(rank(out, ["neighborhood"], value="pct_diff"))
    return out.round({"covid_count": 2, "pre_covid_count": 2, "covid_difference": 2})


# --- Tags --------------------------------------------------------------------


def _tag_filter(tag: str) -> f.Filter:
    if tag in TAG_FLAGS:
        return f.flag(tag)
    if tag == "casualty":
        return f.eq("crash_severity", CASUALTY_CRASH)
    raise KeyError(f"Unknown tag: {tag}")


def tag_share_by_neighborhood(store: RecordStore, tag: str) -> pd.DataFrame:
    """Which neighbourhoods account for the accidents carrying ``tag``.

    ``tag`` is one of the Yes/No flags or ``"casualty"``.
    """
    agg = aggregate(store, "neighborhood", where=_tag_filter(tag))
    return round_pct(with_share(_counts(agg, ["neighborhood"])))


def tag_share_vs_overall(store: RecordStore, tag: str) -> pd.DataFrame:
    """Neighbourhood share of ``tag`` accidents against its share of all accidents."""
    tagged = aggregate(store, "neighborhood", where=_tag_filter(tag))
    overall = aggregate(store, "neighborhood")
    out = compare(tagged, overall, "neighborhood")
    return round_pct(rank(out, ["neighborhood"], value="pp_diff"))


def tag_by_time_of_day(store: RecordStore, tag: str, neighborhood: str) -> pd.DataFrame:
    where = _tag_filter(tag) & f.eq("neighborhood", neighborhood)
    agg = _counts(aggregate(store, "time_of_day", where=where), ["time_of_day"])
    return in_natural_order(agg, "time_of_day")


def tag_time_of_day_vs_city(store: RecordStore, tag: str, neighborhood: str) -> pd.DataFrame:
    """When ``tag`` accidents happen in a neighbourhood compared to the rest of the city."""
    out = vs_rest_of_city(store, "time_of_day", neighborhood, where=_tag_filter(tag))
    return round_pct(in_natural_order(out, "time_of_day"))


def casualty_victims_vs_average(store: RecordStore, top: int | None = 10) -> pd.DataFrame:
    """Victims per casualty crash by neighbourhood, against the neighbourhood average."""
    agg = aggregate(store, "neighborhood", where=_tag_filter("casualty"))
    agg = agg.assign(victims_per_accident=agg["total_victims"] / agg["count"])
    agg = agg[["neighborhood", "total_victims", "count", "victims_per_accident"]]
    out = round_pct(compare_to_mean(agg, "victims_per_accident"))
    return out.head(top) if top else out


# --- Catalogue -----------------------------------------------------------------

ReportFn = Callable[[RecordStore], pd.DataFrame]

# The question sequence of the Vancouver analysis, with the places it looked at.
REPORTS: dict[str, ReportFn] = {
    "accidents_by_neighborhood": accidents_by_neighborhood,
    "accidents_by_street": accidents_by_street,
    "accidents_by_street_base": accidents_by_street_base,
    "accidents_by_street_and_neighborhood": accidents_by_street_and_neighborhood,
    "mount_pleasant_streets": lambda s: accidents_by_street_and_neighborhood(s, "Mount Pleasant"),
    "top_intersections": top_intersections,
    "downtown_intersections": lambda s: top_intersections(s, "Downtown"),
    "w_georgia_intersections": lambda s: top_intersections(s, "Downtown", "W GEORGIA ST"),
    "w_georgia_intersection_summary": lambda s: intersection_summary(s, "Downtown", "W GEORGIA ST"),
    "accidents_by_cross_street": accidents_by_cross_street,
    "victoria_dr_intersections": lambda s: intersections_on_cross_street(s, "VICTORIA DR"),
    "victoria_dr_e_41st_ave": lambda s: accidents_at_streets(s, "VICTORIA DR", "E 41ST AVE"),
    "accidents_by_victim_count": accidents_by_victim_count,
    "accidents_by_crash_count": accidents_by_crash_count,
    "accidents_by_configuration": accidents_by_configuration,
    "victims_by_neighborhood": victims_by_neighborhood,
    "casualty_rate_by_neighborhood": casualty_rate_by_neighborhood,
    "kensington_victim_breakdown": lambda s: victim_breakdown(s, "Kensington-Cedar Cottage"),
    "multi_crash_share_by_neighborhood": multi_crash_share_by_neighborhood,
    "multi_crash_share_by_location": multi_crash_share_by_location,
    "average_victims_by_configuration": average_victims_by_configuration,
    "average_victims_by_neighborhood": average_victims_by_neighborhood,
    "south_cambie_average_victims": lambda s: average_victims_by_location(s, "South Cambie"),
    "accidents_by_time_of_day": accidents_by_time_of_day,
    "neighborhoods_at_rush_hour": lambda s: neighborhoods_at_time(s, "15:00-17:59"),
    "rush_hour_share_by_neighborhood": lambda s: time_share_by_neighborhood(s, "15:00-17:59"),
    "west_point_grey_rush_hour_locations": lambda s: time_share_by_location(
        s, "15:00-17:59", "West Point Grey"
    ),
    "accidents_by_day": accidents_by_day,
    "weekday_share_by_neighborhood": weekday_share_by_neighborhood,
    "shaughnessy_days_vs_city": lambda s: day_of_week_vs_city(s, "Shaughnessy"),
    "accidents_by_month": accidents_by_month,
    "accidents_by_year": accidents_by_year,
    "covid_change_by_neighborhood": covid_change_by_neighborhood,
    "animal_share_by_neighborhood": lambda s: tag_share_by_neighborhood(s, "animal"),
    "cyclist_share_by_neighborhood": lambda s: tag_share_by_neighborhood(s, "cyclist"),
    "casualty_share_by_neighborhood": lambda s: tag_share_by_neighborhood(s, "casualty"),
    "heavy_vehicle_share_by_neighborhood": lambda s: tag_share_by_neighborhood(s, "heavy_vehicle"),
    "heavy_vehicle_vs_overall": lambda s: tag_share_vs_overall(s, "heavy_vehicle"),
    "strathcona_heavy_vehicle_times": lambda s: tag_by_time_of_day(s, "heavy_vehicle", "Strathcona"),
    "strathcona_heavy_vehicle_vs_city": lambda s: tag_time_of_day_vs_city(
        s, "heavy_vehicle", "Strathcona"
    ),
    "casualty_victims_vs_average": casualty_victims_vs_average,
    "severity_mismatches": inconsistent_severity,
}


def build_reports(store: RecordStore, names: Sequence[str] | None = None) -> dict[str, pd.DataFrame]:
    """Run the catalogued reports (all of them by default)."""
    names = list(names) if names is not None else list(REPORTS)
    unknown = [n for n in names if n not in REPORTS]
    if unknown:
        raise KeyError(f"Unknown reports: {unknown}")

    reports = {}
    for name in names:
        reports[name] = REPORTS[name](store)
        logger.info("Built report %s: %d rows", name, len(reports[name]))
    return reports
