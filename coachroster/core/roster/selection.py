"""
Selection state for bulk operations on the roster.
"""

from typing import Iterable, Iterator


class SelectionSet:
    """
    The set of athlete ids the admin has ticked.

    Pure view state: it is never persisted, and it knows nothing about the
    order athletes were fetched in. select_all takes whatever ids the
    caller is currently showing.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)

    def select(self, athlete_id: str) -> None:
        self._ids.add(athlete_id)

    def deselect(self, athlete_id: str) -> None:
        self._ids.discard(athlete_id)

    def toggle(self, athlete_id: str) -> bool:
        """Flip membership. Returns True if the id is now selected."""
        if athlete_id in self._ids:
            self._ids.discard(athlete_id)
            return False
        self._ids.add(athlete_id)
        return True

    def select_all(self, athlete_ids: Iterable[str]) -> None:
        self._ids = set(athlete_ids)

    def clear(self) -> None:
        self._ids.clear()

    def retain(self, athlete_ids: Iterable[str]) -> None:
        """Keep only the given ids (e.g. the ones that failed to update)."""
        self._ids &= set(athlete_ids)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def __contains__(self, athlete_id: object) -> bool:
        return athlete_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __repr__(self) -> str:
        return f"SelectionSet({sorted(self._ids)!r})"
