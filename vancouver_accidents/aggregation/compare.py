"""Compare a subgroup's distribution against a baseline distribution."""

import logging
from collections.abc import Sequence

import pandas as pd

from vancouver_accidents.aggregation.aggregate import rank

logger = logging.getLogger(__name__)

# Result of a ratio whose baseline is zero or absent.
UNDEFINED_RATIO = pd.NA


def relative_difference(value: float, baseline: float):
    """Percent change of ``value`` relative to ``baseline``; UNDEFINED_RATIO when baseline is 0."""
    if pd.isna(baseline) or baseline == 0 or pd.isna(value):
        return UNDEFINED_RATIO
    return (value - baseline) / baseline * 100


def distribution(agg: pd.DataFrame, on: str | Sequence[str], column: str = "count") -> pd.DataFrame:
    """Each key's share of ``column``'s total, in percent."""
    on = [on] if isinstance(on, str) else list(on)
    total = agg[column].sum()
    out = agg[on].copy()
    if total:
        out["pct"] = agg[column] / total * 100
    else:
        out["pct"] = 0.0
    return out


def compare(
    subgroup: pd.DataFrame,
    baseline: pd.DataFrame,
    on: str | Sequence[str],
    column: str = "count",
) -> pd.DataFrame:
    """Per key: subgroup share, baseline share, point difference and relative difference.

    Both inputs are aggregates over the same dimension(s) ``on``. Keys
    present in only one side count as 0 % on the other. Where the baseline
    share is 0 the relative difference is undefined: ``pct_diff`` is <NA>
    and ``ratio_defined`` is False.
    """
    on = [on] if isinstance(on, str) else list(on)
    merged = distribution(subgroup, on, column).rename(columns={"pct": "subgroup_pct"}).merge(
        distribution(baseline, on, column).rename(columns={"pct": "baseline_pct"}),
        on=on,
        how="outer",
    )
    merged[["subgroup_pct", "baseline_pct"]] = merged[["subgroup_pct", "baseline_pct"]].fillna(0.0)

    merged["pp_diff"] = merged["subgroup_pct"] - merged["baseline_pct"]
    merged["ratio_defined"] = merged["baseline_pct"] > 0
    pct_diff = pd.Series(pd.NA, index=merged.index, dtype="Float64")
    defined = merged["ratio_defined"]
    pct_diff[defined] = merged.loc[defined, "pp_diff"] / merged.loc[defined, "baseline_pct"] * 100
    merged["pct_diff"] = pct_diff

    undefined = int((~defined).sum())
    if undefined:
        logger.info("%d keys have an empty baseline; their relative difference is undefined", undefined)
    return rank(merged, on, value="pct_diff")


def compare_to_mean(agg: pd.DataFrame, column: str) -> pd.DataFrame:
    """Each row's ``column`` against the unweighted mean of ``column`` across rows."""
    out = agg.copy()
    mean = out[column].mean()
    out[f"overall_{column}"] = mean
    if pd.isna(mean) or mean == 0:
        out["pct_diff"] = pd.Series(pd.NA, index=out.index, dtype="Float64")
    else:
        out["pct_diff"] = (out[column] / mean - 1) * 100
    return out.sort_values("pct_diff", ascending=False, kind="mergesort").reset_index(drop=True)
