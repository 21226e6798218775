"""Composable row predicates for the aggregator.

A filter carries the columns it reads so the record store only joins the
facets that the filter actually needs.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import pandas as pd

Predicate = Callable[[pd.DataFrame], pd.Series]


@dataclass(frozen=True)
class Filter:
    columns: frozenset[str]
    predicate: Predicate
    label: str = ""

    def __call__(self, df: pd.DataFrame) -> pd.Series:
        return self.predicate(df).fillna(False).astype(bool)

    def __and__(self, other: "Filter") -> "Filter":
        return Filter(
            self.columns | other.columns,
            lambda df: self(df) & other(df),
            f"({self.label} AND {other.label})",
        )

    def __or__(self, other: "Filter") -> "Filter":
        return Filter(
            self.columns | other.columns,
            lambda df: self(df) | other(df),
            f"({self.label} OR {other.label})",
        )

    def __invert__(self) -> "Filter":
        return Filter(self.columns, lambda df: ~self(df), f"NOT {self.label}")

    def __str__(self) -> str:
        return self.label


def eq(column: str, value: Any) -> Filter:
    return Filter(frozenset({column}), lambda df: df[column] == value, f"{column} = {value!r}")


def ne(column: str, value: Any) -> Filter:
    return Filter(frozenset({column}), lambda df: df[column] != value, f"{column} != {value!r}")


def isin(column: str, values: Iterable[Any]) -> Filter:
    values = list(values)
    return Filter(frozenset({column}), lambda df: df[column].isin(values), f"{column} IN {values}")


def notin(column: str, values: Iterable[Any]) -> Filter:
    return ~isin(column, values)


def contains(column: str, text: str) -> Filter:
    """Substring match, like SQL ``column LIKE '%text%'``."""
    return Filter(
        frozenset({column}),
        lambda df: df[column].str.contains(text, regex=False),
        f"{column} LIKE '%{text}%'",
    )


def gt(column: str, value: Any) -> Filter:
    return Filter(frozenset({column}), lambda df: df[column] > value, f"{column} > {value!r}")


def ge(column: str, value: Any) -> Filter:
    return Filter(frozenset({column}), lambda df: df[column] >= value, f"{column} >= {value!r}")


def lt(column: str, value: Any) -> Filter:
    return Filter(frozenset({column}), lambda df: df[column] < value, f"{column} < {value!r}")


def flag(name: str) -> Filter:
    """Accidents carrying the given Yes/No tag."""
    return Filter(frozenset({name}), lambda df: df[name] == True, f"{name} = Yes")  # noqa: E712


def intersection() -> Filter:
    """Accidents recorded at an intersection (a cross street is present)."""
    return Filter(
        frozenset({"cross_street"}),
        lambda df: df["cross_street"] != "",
        "cross_street != ''",
    )
