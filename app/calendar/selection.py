from __future__ import annotations

from typing import Iterable, Iterator


class OutfitSelection:
    """Caller-owned set of outfit ids waiting for a batch add, in pick order."""

    def __init__(self, outfit_ids: Iterable[str] = ()) -> None:
        self._ids: list[str] = []
        for oid in outfit_ids:
            if oid not in self._ids:
                self._ids.append(oid)

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def toggle(self, outfit_id: str) -> None:
        if outfit_id in self._ids:
            self._ids.remove(outfit_id)
        else:
            self._ids.append(outfit_id)

    def toggle_all(self, outfit_ids: Iterable[str]) -> None:
        page = list(dict.fromkeys(outfit_ids))
        if page and all(oid in self._ids for oid in page):
            self._ids = [oid for oid in self._ids if oid not in page]
        else:
            self._ids.extend(oid for oid in page if oid not in self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, outfit_id: object) -> bool:
        return outfit_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
