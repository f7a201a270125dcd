"""Hooks that other components register to react to rollapp state changes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


class RollappHooks(ABC):
    """Receiver of rollapp events; raise from a hook to reject the change."""

    @abstractmethod
    def before_update_state(self, ctx: Any, seq_addr: str, rollapp_id: str) -> None:
        """Called before a sequencer's state update of a rollapp is accepted."""


class MultiRollappHooks(RollappHooks):
    """Runs several hooks in order, stopping at the first that raises."""

    def __init__(self, *args: RollappHooks) -> None:
        self._hooks = tuple(args)

    def __iter__(self) -> Iterator[RollappHooks]:
        return iter(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def before_update_state(self, ctx: Any, seq_addr: str, rollapp_id: str) -> None:
        for hook in self._hooks:
            hook.before_update_state(ctx, seq_addr, rollapp_id)