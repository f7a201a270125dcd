"""Transaction messages of the rollapp module and their stateless checks."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .addresses import acc_address_from_bech32
from .errors import (
    InvalidAddressError,
    InvalidBlockSequenceError,
    InvalidIntermediateStatesRootError,
    InvalidMaxSequencersError,
    InvalidMaxWithholdingError,
    InvalidNumBlocksError,
    InvalidPermissionedAddressError,
    InvalidStateRootError,
    PermissionedAddressesDuplicateError,
    WrongBlockHeightError,
)
from .keys import ROUTER_KEY
from .model import BlockDescriptor

TYPE_MSG_CREATE_ROLLAPP = "create_rollapp"
TYPE_MSG_UPDATE_STATE = "update_state"
ROOT_LENGTH = 32


def _sorted_json(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode()


def _check_creator(creator: str) -> None:
    try:
        acc_address_from_bech32(creator)
    except ValueError as err:
        raise InvalidAddressError(f"invalid creator address ({err})") from err


@dataclass
class MsgCreateRollapp:
    creator: str = ""
    rollapp_id: str = ""
    code_stamp: str = ""
    genesis_path: str = ""
    max_withholding_blocks: int = 0
    max_sequencers: int = 0
    permissioned_addresses: list[str] = field(default_factory=list)

    route: ClassVar[str] = ROUTER_KEY
    msg_type: ClassVar[str] = TYPE_MSG_CREATE_ROLLAPP
    amino_name: ClassVar[str] = "rollapp/CreateRollapp"

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.creator)]

    def sign_bytes(self) -> bytes:
        return _sorted_json(
            {
                "creator": self.creator,
                "rollapp_id": self.rollapp_id,
                "code_stamp": self.code_stamp,
                "genesis_path": self.genesis_path,
                "max_withholding_blocks": str(self.max_withholding_blocks),
                "max_sequencers": str(self.max_sequencers),
                "permissioned_addresses": {"addresses": list(self.permissioned_addresses)},
            }
        )

    def validate_basic(self) -> None:
        """Raise if the message is malformed, independently of chain state."""
        _check_creator(self.creator)
        if self.max_sequencers == 0:
            raise InvalidMaxSequencersError("max-sequencers must be greater than 0")
        if self.max_withholding_blocks == 0:
            raise InvalidMaxWithholdingError("max-withholding-blocks must be greater than 0")
        seen: set[str] = set()
        for address in self.permissioned_addresses:
            if address in seen:
                raise PermissionedAddressesDuplicateError(f"address: {address}")
            try:
                acc_address_from_bech32(address)
            except ValueError as err:
                raise InvalidPermissionedAddressError(
                    f"invalid permissioned address: {err}"
                ) from err
            seen.add(address)


@dataclass
class MsgUpdateState:
    creator: str = ""
    rollapp_id: str = ""
    start_height: int = 0
    num_blocks: int = 0
    da_path: str = ""
    version: int = 0
    bds: list[BlockDescriptor] = field(default_factory=list)

    route: ClassVar[str] = ROUTER_KEY
    msg_type: ClassVar[str] = TYPE_MSG_UPDATE_STATE
    amino_name: ClassVar[str] = "rollapp/UpdateState"

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.creator)]

    def sign_bytes(self) -> bytes:
        return _sorted_json(
            {
                "creator": self.creator,
                "rollapp_id": self.rollapp_id,
                "start_height": str(self.start_height),
                "num_blocks": str(self.num_blocks),
                "da_path": self.da_path,
                "version": str(self.version),
                "bds": {
                    "bd": [
                        {
                            "height": str(bd.height),
                            "state_root": base64.b64encode(bd.state_root).decode(),
                            "intermediate_states_root": base64.b64encode(
                                bd.intermediate_states_root
                            ).decode(),
                        }
                        for bd in self.bds
                    ]
                },
            }
        )

    def validate_basic(self) -> None:
        """Raise if the message is malformed, independently of chain state."""
        _check_creator(self.creator)
        if self.num_blocks == 0:
            raise InvalidNumBlocksError("number of blocks can not be zero")
        if len(self.bds) != self.num_blocks:
            raise InvalidNumBlocksError(
                f"number of blocks ({self.num_blocks}) != "
                f"number of block descriptors({len(self.bds)})"
            )
        if self.start_height == 0:
            raise WrongBlockHeightError("StartHeight must be greater than zero")
        for offset, bd in enumerate(self.bds):
            if bd.height != self.start_height + offset:
                raise InvalidBlockSequenceError()
            if len(bd.state_root) != ROOT_LENGTH:
                raise InvalidStateRootError(
                    f"StateRoot of block high ({bd.height}) must be 32 byte array. "
                    f"But received ({len(bd.state_root)}) bytes"
                )
            if len(bd.intermediate_states_root) != ROOT_LENGTH:
                raise InvalidIntermediateStatesRootError(
                    f"IntermediateStatesRoot of block high ({bd.height}) must be 32 byte array. "
                    f"But received ({len(bd.intermediate_states_root)}) bytes"
                )