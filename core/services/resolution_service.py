"""Duplicate resolution: decide which member of a group survives.

The member with the lexicographically smallest identifying string (plain,
case-sensitive string order) is kept; all other members are marked for removal.
The choice does not look at record content, so re-running it on the same
group always keeps the same member.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from core.services.grouping_service import GroupingResult

T = TypeVar("T")


def resolve_duplicates(
    group: Sequence[T], identifier_of: Callable[[T], str]
) -> tuple[T, list[T]]:
    """Return `(keep, remove)` for a non-empty group.

    Raises:
        ValueError: If `group` is empty.
    """
    if not group:
        raise ValueError("cannot resolve an empty group")
    if len(group) == 1:
        return group[0], []
    ordered = sorted(group, key=identifier_of)
    return ordered[0], ordered[1:]


@dataclass(frozen=True)
class DuplicateDecision(Generic[T]):
    base_identifier: str
    keep: T
    remove: tuple[T, ...]


@dataclass
class DedupPlan(Generic[T]):
    """Decisions for every duplicate group of a grouping result.

    Attributes:
        decisions: One decision per group with more than one member, in group order.
        grouping: The grouping the decisions were computed from.
    """

    decisions: list[DuplicateDecision[T]] = field(default_factory=list)
    grouping: GroupingResult[T] = field(default_factory=GroupingResult)

    @property
    def removal_count(self) -> int:
        return sum(len(d.remove) for d in self.decisions)

    def removed(self) -> list[T]:
        """Items marked for removal, in decision order."""
        return [item for d in self.decisions for item in d.remove]

    def kept(self, items: Sequence[T]) -> list[T]:
        """Return `items` without the removed ones, preserving input order."""
        removed_ids = {id(item) for item in self.removed()}
        return [item for item in items if id(item) not in removed_ids]


def plan_deduplication(
    grouping: GroupingResult[T], identifier_of: Callable[[T], str]
) -> DedupPlan[T]:
    """Resolve every duplicate group in `grouping`."""
    plan: DedupPlan[T] = DedupPlan(grouping=grouping)
    for base_identifier, members in grouping.duplicate_groups().items():
        keep, remove = resolve_duplicates(members, identifier_of)
        plan.decisions.append(
            DuplicateDecision(base_identifier=base_identifier, keep=keep, remove=tuple(remove))
        )
    return plan
