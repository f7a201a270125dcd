"""Genesis state of the rollapp module."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .keys import (
    block_height_to_finalization_queue_key,
    latest_finalized_state_index_key,
    latest_state_info_index_key,
    rollapp_key,
    state_info_key,
)
from .model import BlockHeightToFinalizationQueue, Rollapp, StateInfo, StateInfoIndex
from .params import Params, default_params

DEFAULT_INDEX = 1


def _reject_duplicates(keys: Iterable[bytes], what: str) -> None:
    seen: set[bytes] = set()
    for key in keys:
        if key in seen:
            raise ValueError(f"duplicated index for {what}")
        seen.add(key)


@dataclass
class GenesisState:
    params: Params = field(default_factory=default_params)
    rollapp_list: list[Rollapp] = field(default_factory=list)
    state_info_list: list[StateInfo] = field(default_factory=list)
    latest_state_info_index_list: list[StateInfoIndex] = field(default_factory=list)
    latest_finalized_state_index_list: list[StateInfoIndex] = field(default_factory=list)
    block_height_to_finalization_queue_list: list[BlockHeightToFinalizationQueue] = field(
        default_factory=list
    )

    def validate(self) -> None:
        """Raise on duplicated entries or invalid parameters."""
        _reject_duplicates((rollapp_key(r.rollapp_id) for r in self.rollapp_list), "rollapp")
        _reject_duplicates(
            (state_info_key(s.state_info_index) for s in self.state_info_list), "stateInfo"
        )
        _reject_duplicates(
            (latest_state_info_index_key(i.rollapp_id) for i in self.latest_state_info_index_list),
            "latestStateInfoIndex",
        )
        _reject_duplicates(
            (
                latest_finalized_state_index_key(i.rollapp_id)
                for i in self.latest_finalized_state_index_list
            ),
            "latestFinalizedStateIndex",
        )
        _reject_duplicates(
            (
                block_height_to_finalization_queue_key(q.finalization_height)
                for q in self.block_height_to_finalization_queue_list
            ),
            "blockHeightToFinalizationQueue",
        )
        self.params.validate()


def default_genesis() -> GenesisState:
    return GenesisState()