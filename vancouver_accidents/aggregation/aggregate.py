"""Group-by counts, sums and ratios over the record store."""

import logging
from collections.abc import Sequence

import pandas as pd

from vancouver_accidents.aggregation.filters import Filter
from vancouver_accidents.store.records import RecordStore
from vancouver_accidents.store.schema import NATURAL_ORDER

logger = logging.getLogger(__name__)

MEASURES = ("count", "total_victims", "total_crashes")


def _as_list(by: str | Sequence[str]) -> list[str]:
    by = [by] if isinstance(by, str) else list(by)
    if not by:
        raise ValueError("At least one grouping column is required")
    return by


def _filtered_frame(
    store: RecordStore, columns: set[str], where: Filter | None
) -> pd.DataFrame:
    if where is not None:
        columns = columns | where.columns
    df = store.frame(columns)
    if where is not None:
        df = df[where(df)]
        logger.debug("Filter %s kept %d rows", where, len(df))
    return df


def rank(agg: pd.DataFrame, by: Sequence[str], value: str = "count") -> pd.DataFrame:
    """Sort by ``value`` descending, ties broken by the group key ascending."""
    by = list(by)
    return agg.sort_values(
        [value, *by],
        ascending=[False] + [True] * len(by),
        kind="mergesort",
        na_position="last",
    ).reset_index(drop=True)


def aggregate(
    store: RecordStore,
    by: str | Sequence[str],
    where: Filter | None = None,
    min_count: int | None = None,
    having: Filter | None = None,
) -> pd.DataFrame:
    """Count accidents and sum victims/crashes per group.

    ``min_count`` drops groups with fewer accidents before ranking, the way
    ``HAVING COUNT(*) >= n`` does. ``having`` is a further filter evaluated
    on the aggregated columns. When a measure is itself a grouping column
    its sum is reported as ``<measure>_sum`` (key times count).
    """
    by = _as_list(by)
    sums = [m for m in MEASURES[1:] if m not in by]
    df = _filtered_frame(store, set(by) | set(MEASURES[1:]), where)

    agg = (
        df.groupby(by, sort=False, dropna=False)
        .agg(count=("id", "size"), **{m: (m, "sum") for m in sums})
        .reset_index()
    )
    for m in MEASURES[1:]:
        if m in by:
            agg[f"{m}_sum"] = agg[m] * agg["count"]
    if min_count is not None:
        agg = agg[agg["count"] >= min_count]
    if having is not None:
        agg = agg[having(agg)]
    return rank(agg, by)


def with_share(agg: pd.DataFrame, column: str = "count") -> pd.DataFrame:
    """Add each group's share of the grand total, like ``x / SUM(x) OVER ()``."""
    grand_total = agg[column].sum()
    out = agg.copy()
    out["grand_total"] = grand_total
    if grand_total:
        out["pct_total"] = out[column] / grand_total * 100
    else:
        out["pct_total"] = pd.Series(pd.NA, index=out.index, dtype="Float64")
    return out


def proportion(
    store: RecordStore,
    by: str | Sequence[str],
    condition: Filter,
    where: Filter | None = None,
    min_count: int | None = None,
) -> pd.DataFrame:
    """Share of each group's accidents that satisfy ``condition``, in percent."""
    by = _as_list(by)
    df = _filtered_frame(store, set(by) | condition.columns, where)

    agg = (
        df.assign(matching=condition(df).astype(int))
        .groupby(by, sort=False, dropna=False)
        .agg(matching=("matching", "sum"), count=("id", "size"))
        .reset_index()
    )
    if min_count is not None:
        agg = agg[agg["count"] >= min_count]
    agg = agg.assign(pct=agg["matching"] / agg["count"] * 100)
    return rank(agg, by, value="pct")


def average(
    store: RecordStore,
    by: str | Sequence[str],
    column: str,
    where: Filter | None = None,
    min_count: int | None = None,
) -> pd.DataFrame:
    """Mean of a numeric column per group, with the group size."""
    by = _as_list(by)
    df = _filtered_frame(store, set(by) | {column}, where)
    avg_col = f"avg_{column}"

    agg = (
        df.groupby(by, sort=False, dropna=False)
        .agg(**{avg_col: (column, "mean"), "count": ("id", "size")})
        .reset_index()
    )
    if min_count is not None:
        agg = agg[agg["count"] >= min_count]
    return rank(agg, by, value=avg_col)


def in_natural_order(agg: pd.DataFrame, column: str) -> pd.DataFrame:
    """Re-sort a time report by calendar order (time bucket, weekday, month, year)."""
    order = NATURAL_ORDER.get(column)
    if order is None:
        return agg.sort_values(column, kind="mergesort").reset_index(drop=True)
    position = {value: i for i, value in enumerate(order)}
    return agg.sort_values(
        column, key=lambda s: s.map(position).fillna(len(order)), kind="mergesort"
    ).reset_index(drop=True)
