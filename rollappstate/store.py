"""In-memory key-value store, prefixed views, block context and pagination."""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from .model import Event

DEFAULT_LIMIT = 100


class KVStore:
    """Ordered byte-keyed store; values are copied on the way in and out."""

    def __init__(self) -> None:
        self._data: dict[bytes, Any] = {}

    def get(self, key: bytes) -> Any:
        """Return a copy of the value under key, or None if there is none."""
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: bytes, value: Any) -> None:
        if value is None:
            raise ValueError("value is nil")
        self._data[bytes(key)] = copy.deepcopy(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(key, None)

    def items(self) -> Iterator[tuple[bytes, Any]]:
        """Yield (key, value) pairs in ascending key order."""
        for key in sorted(self._data):
            yield key, copy.deepcopy(self._data[key])

    def __len__(self) -> int:
        return len(self._data)


class PrefixStore:
    """View of a parent store restricted to keys under a fixed prefix."""

    def __init__(self, parent: Union[KVStore, "PrefixStore"], prefix: bytes) -> None:
        self._parent = parent
        self._prefix = bytes(prefix)

    def get(self, key: bytes) -> Any:
        return self._parent.get(self._prefix + key)

    def set(self, key: bytes, value: Any) -> None:
        self._parent.set(self._prefix + key, value)

    def delete(self, key: bytes) -> None:
        self._parent.delete(self._prefix + key)

    def items(self) -> Iterator[tuple[bytes, Any]]:
        """Yield (key, value) pairs under the prefix, with the prefix removed."""
        size = len(self._prefix)
        for key, value in self._parent.items():
            if key.startswith(self._prefix):
                yield key[size:], value


Store = Union[KVStore, PrefixStore]


@dataclass
class Context:
    """State and block information a keeper call runs against."""

    store: KVStore = field(default_factory=KVStore)
    block_height: int = 0
    is_check_tx: bool = False
    is_recheck_tx: bool = False
    events: list[Event] = field(default_factory=list)

    def emit_event(self, event: Event) -> None:
        self.events.append(event)

    def with_block_height(self, height: int) -> "Context":
        """Return a context at another height sharing this store and event log."""
        return dataclasses.replace(self, block_height=height)


@dataclass
class PageRequest:
    key: bytes | None = None
    offset: int = 0
    limit: int = 0
    count_total: bool = False
    reverse: bool = False


@dataclass
class PageResponse:
    next_key: bytes | None = None
    total: int = 0


def paginate(
    store: Store,
    page_request: PageRequest | None,
    on_item: Callable[[bytes, Any], None],
) -> PageResponse:
    """Feed one page of the store's entries to on_item and describe the page."""
    request = page_request or PageRequest()
    key = request.key
    offset = request.offset
    limit = request.limit
    count_total = request.count_total

    if offset > 0 and key is not None:
        raise ValueError("invalid request, either offset or key is expected, got both")
    if limit == 0:
        limit = DEFAULT_LIMIT
        count_total = True

    entries = list(store.items())
    if request.reverse:
        entries.reverse()

    if key:
        if request.reverse:
            entries = [(k, v) for k, v in entries if k <= key]
        else:
            entries = [(k, v) for k, v in entries if k >= key]
        next_key = None
        count = 0
        for entry_key, value in entries:
            if count == limit:
                next_key = entry_key
                break
            on_item(entry_key, value)
            count += 1
        return PageResponse(next_key=next_key)

    end = offset + limit
    next_key = None
    count = 0
    for entry_key, value in entries:
        count += 1
        if count <= offset:
            continue
        if count <= end:
            on_item(entry_key, value)
        elif count == end + 1:
            next_key = entry_key
            if not count_total:
                break
    return PageResponse(next_key=next_key, total=count if count_total else 0)