"""Store names and key layouts of the rollapp module."""

from __future__ import annotations

import struct

from .model import StateInfoIndex

MODULE_NAME = "rollapp"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
MEM_STORE_KEY = "mem_rollapp"

ROLLAPP_KEY_PREFIX = "Rollapp/value/"
STATE_INFO_KEY_PREFIX = "StateInfo/value/"
LATEST_STATE_INFO_INDEX_KEY_PREFIX = "LatestStateInfoIndex/value/"
LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX = "LatestFinalizedStateIndex/value/"
BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX = "BlockHeightToFinalizationQueue/value/"

_SEPARATOR = b"/"
_UINT64_MAX = (1 << 64) - 1


def key_prefix(prefix: str) -> bytes:
    return prefix.encode()


def rollapp_key(rollapp_id: str) -> bytes:
    return rollapp_id.encode() + _SEPARATOR


def state_info_key(state_info_index: StateInfoIndex) -> bytes:
    return (
        state_info_index.rollapp_id.encode()
        + _SEPARATOR
        + str(state_info_index.index).encode()
        + _SEPARATOR
    )


def latest_state_info_index_key(rollapp_id: str) -> bytes:
    return rollapp_id.encode() + _SEPARATOR


def latest_finalized_state_index_key(rollapp_id: str) -> bytes:
    return rollapp_id.encode() + _SEPARATOR


def block_height_to_finalization_queue_key(finalization_height: int) -> bytes:
    """Big-endian uint64 height followed by the separator."""
    if not 0 <= finalization_height <= _UINT64_MAX:
        raise ValueError(f"height out of uint64 range: {finalization_height}")
    return struct.pack(">Q", finalization_height) + _SEPARATOR