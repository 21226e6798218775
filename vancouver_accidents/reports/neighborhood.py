"""One consistent report per neighbourhood: where, when and what kind of accidents."""

import logging

import pandas as pd

from vancouver_accidents.aggregation import filters as f
from vancouver_accidents.aggregation.aggregate import aggregate, in_natural_order
from vancouver_accidents.reports.questions import (
    accidents_by_street_and_neighborhood,
    day_of_week_vs_city,
    round_pct,
    top_intersections,
    vs_rest_of_city,
)
from vancouver_accidents.store.records import RecordStore
from vancouver_accidents.store.schema import TAG_FLAGS

logger = logging.getLogger(__name__)


def tag_profile(store: RecordStore, neighborhood: str) -> pd.DataFrame:
    """For each tag, the neighbourhood's share of tagged accidents vs its share of all accidents."""
    overall = aggregate(store, "neighborhood")
    city_total = overall["count"].sum()
    local_total = overall.loc[overall["neighborhood"] == neighborhood, "count"].sum()
    overall_pct = local_total / city_total * 100 if city_total else None

    rows = []
    for tag in TAG_FLAGS:
        tagged = aggregate(store, "neighborhood", where=f.flag(tag))
        tag_total = tagged["count"].sum()
        local = tagged.loc[tagged["neighborhood"] == neighborhood, "count"].sum()
        rows.append(
            {
                "tag": tag,
                "count": int(local),
                "tag_total": int(tag_total),
                "pct": local / tag_total * 100 if tag_total else None,
                "overall_pct": overall_pct,
            }
        )
    out = pd.DataFrame(rows).astype({"pct": "Float64", "overall_pct": "Float64"})
    out["pp_diff"] = out["pct"] - out["overall_pct"]
    return out.round({"pct": 2, "overall_pct": 2, "pp_diff": 2})


def neighborhood_report(
    store: RecordStore, neighborhood: str, top: int = 10
) -> dict[str, pd.DataFrame]:
    """Bundle the views used to spot higher-risk streets, times and accident types locally."""
    logger.info("Building neighbourhood report for %s", neighborhood)
    in_neighborhood = f.eq("neighborhood", neighborhood)

    time_vs_city = vs_rest_of_city(store, "time_of_day", neighborhood)
    return {
        "summary": aggregate(store, "neighborhood", where=in_neighborhood),
        "top_streets": accidents_by_street_and_neighborhood(store, neighborhood).head(top),
        "top_intersections": top_intersections(store, neighborhood).head(top),
        "time_of_day_vs_city": round_pct(in_natural_order(time_vs_city, "time_of_day")),
        "day_of_week_vs_city": day_of_week_vs_city(store, neighborhood),
        "tags": tag_profile(store, neighborhood),
    }
