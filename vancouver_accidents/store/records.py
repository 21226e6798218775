"""In-memory record store over the four accident facets, joined on the accident id."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import pandas as pd

from vancouver_accidents.config.settings import Settings, get_settings
from vancouver_accidents.ingestion.facets import load_facets
from vancouver_accidents.store.schema import COLUMN_FACET, DERIVED_COLUMNS, FACETS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinReport:
    """Ids that are present in at least one facet but missing from another."""

    missing: dict[str, frozenset[int]]
    total_ids: int

    @property
    def complete(self) -> bool:
        return not any(self.missing.values())

    @property
    def incomplete_ids(self) -> frozenset[int]:
        return frozenset().union(*self.missing.values())

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"facet": facet, "id": accident_id}
            for facet, ids in self.missing.items()
            for accident_id in sorted(ids)
        ]
        return pd.DataFrame(rows, columns=["facet", "id"])


class RecordStore:
    """Read-only snapshot of the accident facets.

    Each facet is kept as its own frame. Callers ask for the columns they
    need and get the inner join of only those facets, so an id missing from
    one facet drops out of the aggregates that use that facet and nowhere
    else. Frames handed out are shared and must not be mutated.
    """

    def __init__(self, facets: Mapping[str, pd.DataFrame]):
        unknown = set(facets) - set(FACETS)
        if unknown:
            raise KeyError(f"Unknown facets: {sorted(unknown)}")
        absent = [name for name in FACETS if name not in facets]
        if absent:
            raise KeyError(f"Missing facets: {absent}")

        self._facets = {name: facets[name].reset_index(drop=True) for name in FACETS}
        self._frames: dict[tuple[str, ...], pd.DataFrame] = {}

        id_sets = [set(df["id"]) for df in self._facets.values()]
        self._all_ids = frozenset().union(*id_sets)
        self._complete_ids = frozenset.intersection(*map(frozenset, id_sets))
        logger.info(
            "Record store ready: %d complete accidents (%d ids across facets)",
            len(self._complete_ids),
            len(self._all_ids),
        )

    @classmethod
    def from_facets(cls, facets: Mapping[str, pd.DataFrame]) -> "RecordStore":
        return cls(facets)

    @classmethod
    def load(cls, settings: Settings | None = None) -> "RecordStore":
        return cls(load_facets(settings or get_settings()))

    def __len__(self) -> int:
        return len(self._complete_ids)

    def facet(self, name: str) -> pd.DataFrame:
        return self._facets[name]

    @staticmethod
    def source_columns(columns: Iterable[str]) -> set[str]:
        """Expand derived columns into the stored columns they are computed from."""
        resolved = set()
        for col in columns:
            if col in DERIVED_COLUMNS:
                resolved.update(DERIVED_COLUMNS[col][0])
            elif col in COLUMN_FACET or col == "id":
                resolved.add(col)
            else:
                raise KeyError(f"Unknown column: {col}")
        return resolved

    def facets_for(self, columns: Iterable[str]) -> tuple[str, ...]:
        needed = {COLUMN_FACET[col] for col in self.source_columns(columns) if col != "id"}
        # keep the canonical order so cached joins are shared
        return tuple(name for name in FACETS if name in needed) or (FACETS[0],)

    def _join(self, names: tuple[str, ...]) -> pd.DataFrame:
        if names not in self._frames:
            frame = self._facets[names[0]]
            for name in names[1:]:
                frame = frame.merge(self._facets[name], on="id", how="inner", validate="one_to_one")
            seen = set().union(*(set(self._facets[n]["id"]) for n in names))
            dropped = len(seen) - len(frame)
            if dropped:
                logger.warning(
                    "Join of %s excludes %d ids missing from one of the facets",
                    "+".join(names),
                    dropped,
                )
            self._frames[names] = frame
        return self._frames[names]

    def frame(self, columns: Iterable[str]) -> pd.DataFrame:
        """Return the accidents with the requested columns (stored or derived)."""
        columns = list(columns)
        frame = self._join(self.facets_for(columns))
        derived = [col for col in columns if col in DERIVED_COLUMNS and col not in frame.columns]
        if derived:
            frame = frame.assign(**{col: DERIVED_COLUMNS[col][1](frame) for col in derived})
        return frame

    def join_report(self) -> JoinReport:
        missing = {}
        for name, df in self._facets.items():
            ids = self._all_ids - set(df["id"])
            if ids:
                logger.warning("%d accident ids have no %s record", len(ids), name)
            missing[name] = frozenset(ids)
        return JoinReport(missing=missing, total_ids=len(self._all_ids))
