"""Alignment check between folder and catalog tokenization depths.

Both collections are grouped independently with their own token counts. When
the two reduction ratios differ by more than the threshold, the token counts
are likely miscalibrated relative to each other (for example folder names
carrying an extra prefix token that catalog identifiers lack).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TypeVar

from core.models import CatalogEntry
from core.services.grouping_service import GroupingResult, group_items
from core.services.normalizer import normalize_identifier

T = TypeVar("T")

DEFAULT_THRESHOLD_PERCENT = 10.0


@dataclass(frozen=True)
class ReductionStats:
    """Grouping statistics for one side of the comparison."""

    label: str
    token_count: int
    total: int
    unique_groups: int
    duplicate_groups: int
    skipped: int = 0

    @property
    def reduction_percent(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.total - self.unique_groups) * 100 / self.total

    @classmethod
    def from_grouping(
        cls, label: str, token_count: int, grouping: GroupingResult
    ) -> ReductionStats:
        return cls(
            label=label,
            token_count=token_count,
            total=grouping.total,
            unique_groups=grouping.unique_count,
            duplicate_groups=len(grouping.duplicate_groups()),
            skipped=len(grouping.skipped),
        )


@dataclass(frozen=True)
class AlignmentReport:
    """Result of `check_alignment`.

    Attributes:
        folders: Stats for folder names.
        catalog: Stats for catalog identifiers.
        threshold: Allowed difference in percentage points.
        shared_base_identifiers: Base identifiers present on both sides.
        folder_samples: First duplicate folder groups, as (base, names).
        catalog_samples: First duplicate catalog groups, as (base, identifiers).
    """

    folders: ReductionStats
    catalog: ReductionStats
    threshold: float = DEFAULT_THRESHOLD_PERCENT
    shared_base_identifiers: int = 0
    folder_samples: list[tuple[str, list[str]]] = field(default_factory=list)
    catalog_samples: list[tuple[str, list[str]]] = field(default_factory=list)

    @property
    def difference(self) -> float:
        return abs(self.folders.reduction_percent - self.catalog.reduction_percent)

    @property
    def is_misaligned(self) -> bool:
        return self.difference > self.threshold


def _samples(
    grouping: GroupingResult[T], names: Callable[[T], str], limit: int
) -> list[tuple[str, list[str]]]:
    dupes = grouping.duplicate_groups()
    return [(base, [names(m) for m in members]) for base, members in list(dupes.items())[:limit]]


def check_alignment(
    folder_names: Iterable[str],
    entries: Iterable[CatalogEntry],
    folder_token_count: int,
    catalog_token_count: int,
    threshold: float = DEFAULT_THRESHOLD_PERCENT,
    sample_limit: int = 10,
) -> AlignmentReport:
    """Compare dedup reduction ratios of folders and catalog entries."""
    folder_grouping = group_items(
        folder_names, lambda name: normalize_identifier(name, folder_token_count)
    )
    catalog_grouping = group_items(
        entries, lambda e: normalize_identifier(e.require_identifier(), catalog_token_count)
    )
    shared = set(folder_grouping.groups) & set(catalog_grouping.groups)

    return AlignmentReport(
        folders=ReductionStats.from_grouping("folders", folder_token_count, folder_grouping),
        catalog=ReductionStats.from_grouping("catalog", catalog_token_count, catalog_grouping),
        threshold=threshold,
        shared_base_identifiers=len(shared),
        folder_samples=_samples(folder_grouping, str, sample_limit),
        catalog_samples=_samples(catalog_grouping, lambda e: e.require_identifier(), sample_limit),
    )
