"""Read-only lookup over a fixed set of targets."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from ..errors import TargetNotFound
from .catalog import DEFAULT_CATALOG, Framework, Language, Platform, Target


class TargetRegistry:
    """Ordered, immutable catalog of compilation targets.

    Registration order is significant: it is the order results are reported
    in and the tie-breaker for every "best target" selection downstream.
    """

    def __init__(self, targets: Iterable[Target]) -> None:
        ordered: List[Target] = []
        index: Dict[str, Target] = {}
        for target in targets:
            if target.id in index:
                raise ValueError(f"Duplicate target id '{target.id}'")
            index[target.id] = target
            ordered.append(target)
        self._targets: Tuple[Target, ...] = tuple(ordered)
        self._index = index

    @classmethod
    def default(cls) -> "TargetRegistry":
        return cls(DEFAULT_CATALOG)

    def list_targets(self) -> Tuple[Target, ...]:
        return self._targets

    def get(self, target_id: str) -> Target:
        try:
            return self._index[target_id]
        except KeyError:
            raise TargetNotFound(target_id) from None

    def select(self, target_ids: Sequence[str] | None) -> Tuple[Target, ...]:
        """Return the requested targets in request order, or every target when none are given."""
        if not target_ids:
            return self._targets
        selected: List[Target] = []
        seen: set[str] = set()
        for target_id in target_ids:
            target = self.get(target_id)
            if target.id in seen:
                continue
            seen.add(target.id)
            selected.append(target)
        return tuple(selected)

    def position(self, target_id: str) -> int:
        return self._targets.index(self.get(target_id))

    def platforms(self) -> List[Platform]:
        return _unique(target.platform for target in self._targets)

    def frameworks(self) -> List[Framework]:
        return _unique(target.framework for target in self._targets)

    def languages(self) -> List[Language]:
        return _unique(target.language for target in self._targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, target_id: object) -> bool:
        return target_id in self._index


def _unique(values: Iterable) -> List:
    result: List = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


__all__ = ["TargetRegistry"]
