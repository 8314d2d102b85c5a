"""Session catalogue of discovered points of interest."""

from __future__ import annotations

import logging
import random
from typing import Collection, Dict, Iterable, List, Optional, Protocol, Tuple

from voyage.config import DEFAULT_BUDGET_LEVEL, category_spec
from voyage.schemas import MAX_BUDGET_LEVEL, MIN_BUDGET_LEVEL, POICategory, POIRecord, RawPOI

_LOGGER = logging.getLogger(__name__)


class BudgetAssigner(Protocol):
    """Strategy deciding the budget level of a freshly ingested POI."""

    def assign(self, raw: RawPOI, category: POICategory) -> int:
        ...


class FixedBudgetAssigner:
    """Assigns the same level to every POI."""

    def __init__(self, level: int = DEFAULT_BUDGET_LEVEL) -> None:
        if not MIN_BUDGET_LEVEL <= level <= MAX_BUDGET_LEVEL:
            raise ValueError(f"Budget level must be between 1 and 4, got {level}")
        self.level = level

    def assign(self, raw: RawPOI, category: POICategory) -> int:
        return self.level


class RandomBudgetAssigner:
    """Placeholder pricing: a uniform level per POI.

    The tagged-POI source has no pricing data, so this stands in until a real
    signal exists.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)

    def assign(self, raw: RawPOI, category: POICategory) -> int:
        return self._random.randint(MIN_BUDGET_LEVEL, MAX_BUDGET_LEVEL)


class POICatalog:
    """Category-tagged POIs in ingestion order.

    Ingestion does not deduplicate: a place returned by several overlapping
    queries is stored once per occurrence. Filtering never removes records.
    """

    def __init__(self, assigner: Optional[BudgetAssigner] = None) -> None:
        self._records: List[POIRecord] = []
        self._assigner: BudgetAssigner = assigner or FixedBudgetAssigner()

    def __len__(self) -> int:
        return len(self._records)

    @property
    def assigner(self) -> BudgetAssigner:
        return self._assigner

    def ingest(
        self,
        records: Iterable[RawPOI],
        category: POICategory,
        assigner: Optional[BudgetAssigner] = None,
    ) -> List[POIRecord]:
        """Convert raw source entries into :class:`POIRecord` values and store them."""

        strategy = assigner or self._assigner
        fallback_name = category_spec(category).name
        added: List[POIRecord] = []
        for raw in records:
            added.append(
                POIRecord(
                    coordinate=raw.coordinate,
                    name=raw.name or fallback_name,
                    category=category,
                    budget_level=strategy.assign(raw, category),
                )
            )
        self._records.extend(added)
        _LOGGER.debug("Ingested %d %s POIs (catalog size %d)", len(added), category.value, len(self._records))
        return added

    def clear(self) -> None:
        self._records = []

    def size(self) -> int:
        return len(self._records)

    def all(self) -> List[POIRecord]:
        return list(self._records)

    def filter_by_budget(self, max_level: int) -> List[POIRecord]:
        return [record for record in self._records if record.budget_level <= max_level]

    def filter_by_category_visibility(
        self, visible_categories: Collection[POICategory]
    ) -> List[POIRecord]:
        visible = set(visible_categories)
        return [record for record in self._records if record.category in visible]

    def visibility(
        self,
        max_level: int,
        visible_categories: Optional[Collection[POICategory]] = None,
    ) -> List[Tuple[POIRecord, bool]]:
        """Pair every record with whether it passes the current filters.

        The presentation layer dims hidden records instead of dropping them.
        """

        categories = set(visible_categories) if visible_categories is not None else None
        projected: List[Tuple[POIRecord, bool]] = []
        for record in self._records:
            shown = record.budget_level <= max_level
            if categories is not None:
                shown = shown and record.category in categories
            projected.append((record, shown))
        return projected

    def counts_by_category(self) -> Dict[POICategory, int]:
        counts: Dict[POICategory, int] = {}
        for record in self._records:
            counts[record.category] = counts.get(record.category, 0) + 1
        return counts


__all__ = [
    "BudgetAssigner",
    "FixedBudgetAssigner",
    "POICatalog",
    "RandomBudgetAssigner",
]
