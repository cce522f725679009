from __future__ import annotations

import hashlib
from collections import OrderedDict
from typing import Any, Callable, Generic, TypeVar

import orjson

from domain.layout_config import LayoutConfig
from domain.ports.layout import LayoutRequest

T = TypeVar("T")


def request_fingerprint(request: LayoutRequest, config: LayoutConfig) -> str:
    payload: dict[str, Any] = {
        "records": [record.to_dict() for record in request.records],
        "filters": request.filters.canonical(),
        "day_view": request.day_view,
        "zoom": request.zoom,
        "config": config.to_dict(),
    }
    encoded = orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
    return hashlib.sha256(encoded).hexdigest()


class LayoutCache(Generic[T]):
    """Content-addressed memo for layout results.

    With the default capacity of one, any change of inputs replaces the
    cached result outright.
    """

    def __init__(self, max_entries: int = 1) -> None:
        if max_entries < 1:
            msg = "max_entries must be >= 1"
            raise ValueError(msg)
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[str, T] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self.hits += 1
            self._entries.move_to_end(key)
            return self._entries[key]
        self.misses += 1
        value = compute()
        self._entries[key] = value
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return value

    def clear(self) -> None:
        self._entries.clear()
