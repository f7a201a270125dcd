"""Records held by the rollapp state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

EVENT_TYPE_STATE_UPDATE = "state_update"
EVENT_TYPE_STATUS_CHANGE = "status_change"

ATTRIBUTE_KEY_ROLLAPP_ID = "rollapp_id"
ATTRIBUTE_KEY_STATE_INFO_INDEX = "state_info_index"
ATTRIBUTE_KEY_START_HEIGHT = "start_height"
ATTRIBUTE_KEY_NUM_BLOCKS = "num_blocks"
ATTRIBUTE_KEY_DA_PATH = "da_path"
ATTRIBUTE_KEY_STATUS = "status"


class StateStatus(IntEnum):
    UNSPECIFIED = 0
    RECEIVED = 1
    FINALIZED = 2

    def __str__(self) -> str:
        return f"STATE_STATUS_{self.name}"


@dataclass(frozen=True)
class StateInfoIndex:
    rollapp_id: str = ""
    index: int = 0


@dataclass
class BlockDescriptor:
    height: int = 0
    state_root: bytes = b""
    intermediate_states_root: bytes = b""


@dataclass
class Rollapp:
    rollapp_id: str = ""
    creator: str = ""
    version: int = 0
    code_stamp: str = ""
    genesis_path: str = ""
    max_withholding_blocks: int = 0
    max_sequencers: int = 0
    permissioned_addresses: list[str] = field(default_factory=list)


@dataclass
class StateInfoSummary:
    state_info_index: StateInfoIndex = field(default_factory=StateInfoIndex)
    status: StateStatus = StateStatus.UNSPECIFIED
    creation_height: int = 0


@dataclass
class StateInfo:
    state_info_index: StateInfoIndex = field(default_factory=StateInfoIndex)
    sequencer: str = ""
    start_height: int = 0
    num_blocks: int = 0
    da_path: str = ""
    version: int = 0
    creation_height: int = 0
    status: StateStatus = StateStatus.UNSPECIFIED
    bds: list[BlockDescriptor] = field(default_factory=list)

    def summary(self) -> StateInfoSummary:
        """Return the index, status and creation height of this state."""
        return StateInfoSummary(
            state_info_index=self.state_info_index,
            status=self.status,
            creation_height=self.creation_height,
        )


@dataclass
class RollappSummary:
    rollapp_id: str = ""
    latest_state_index: StateInfoIndex | None = None
    latest_finalized_state_index: StateInfoIndex | None = None


@dataclass
class BlockHeightToFinalizationQueue:
    finalization_height: int = 0
    finalization_queue: list[StateInfoIndex] = field(default_factory=list)


@dataclass
class DeployerParams:
    address: str = ""
    max_rollapps: int = 0


@dataclass(frozen=True)
class Event:
    type: str
    attributes: tuple[tuple[str, str], ...] = ()

    def attribute(self, key: str) -> str:
        """Return the value of the first attribute named key."""
        for name, value in self.attributes:
            if name == key:
                return value
        raise KeyError(key)