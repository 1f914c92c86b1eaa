"""Stable grouping of records by a computed key.

Groups keep first-seen order, both for the keys and for the members inside
each group, so samples taken from the front of the result are reproducible for
the same input order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class GroupingResult(Generic[T]):
    """Groups keyed by base identifier plus the records that could not be keyed.

    Attributes:
        groups: Insertion-ordered mapping of key to members.
        skipped: Records whose key function failed, in input order.
    """

    groups: dict[str, list[T]] = field(default_factory=dict)
    skipped: list[T] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of grouped records (skipped records excluded)."""
        return sum(len(members) for members in self.groups.values())

    @property
    def unique_count(self) -> int:
        return len(self.groups)

    @property
    def reduction_percent(self) -> float:
        """Share of grouped records that would be removed by deduplication."""
        total = self.total
        if total == 0:
            return 0.0
        return (total - self.unique_count) * 100 / total

    def duplicate_groups(self) -> dict[str, list[T]]:
        """Return only the groups with more than one member, in original order."""
        return {key: members for key, members in self.groups.items() if len(members) > 1}


def group_items(items: Iterable[T], key_fn: Callable[[T], str]) -> GroupingResult[T]:
    """Group `items` by `key_fn`.

    A record whose key function raises `KeyError`, `TypeError` or `ValueError`,
    or returns an empty key, is skipped with a warning instead of aborting the
    run.
    """
    result: GroupingResult[T] = GroupingResult()
    for item in items:
        try:
            key = key_fn(item)
        except (KeyError, TypeError, ValueError) as ex:
            logger.warning("Skipping record without grouping key: {} ({})", item, ex)
            result.skipped.append(item)
            continue
        if not key:
            logger.warning("Skipping record with empty grouping key: {}", item)
            result.skipped.append(item)
            continue
        result.groups.setdefault(key, []).append(item)

    if result.skipped:
        logger.warning("{} record(s) skipped during grouping", len(result.skipped))
    return result
