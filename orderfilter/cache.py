"""Bounded topic -> :class:`Filter` cache.

Peers announce the same handful of topics over and over; compiling the
schemas for each announcement is wasted work. Failed constructions are never
cached so a caller always sees the underlying error.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Mapping

from .filter import Filter

__all__ = ["FilterCache", "filter_from_topic", "default_cache"]

logger = logging.getLogger(__name__)


class FilterCache:
    """Thread-safe LRU cache of filters keyed by topic."""

    def __init__(
        self,
        max_entries: int = 128,
        *,
        contract_addresses: Mapping[int, str] | None = None,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._data: "OrderedDict[str, Filter]" = OrderedDict()
        self._max_entries = int(max_entries)
        self._contract_addresses = dict(contract_addresses or {})
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, topic: object) -> bool:
        with self._lock:
            return topic in self._data

    def get(self, topic: str) -> Filter | None:
        with self._lock:
            found = self._data.get(topic)
            if found is not None:
                self._data.move_to_end(topic)
            return found

    def get_or_create(self, topic: str) -> Filter:
        """Return the cached filter for ``topic``, building it on a miss.

        Construction runs outside the lock; two threads missing on the same
        topic both build a filter and the first one stored wins.
        """

        found = self.get(topic)
        if found is not None:
            return found
        built = Filter.from_topic(topic, contract_addresses=self._contract_addresses)
        with self._lock:
            existing = self._data.get(topic)
            if existing is not None:
                self._data.move_to_end(topic)
                return existing
            self._data[topic] = built
            while len(self._data) > self._max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug("Evicted filter for topic %s", evicted)
        return built

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


default_cache = FilterCache()


def filter_from_topic(topic: str) -> Filter:
    """Return a filter for ``topic`` from the process-wide cache."""

    return default_cache.get_or_create(topic)
