"""Error types raised by the rollapp state machine."""

from __future__ import annotations


class RollappError(Exception):
    """Base error: a codespace, a numeric code and a fixed message, plus optional detail."""

    codespace = "rollapp"
    code = 0
    message = ""

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        return ": ".join(part for part in (self.detail, self.message) if part)


# Errors shared with the wider SDK.


class LogicError(RollappError):
    codespace = "sdk"
    code = 35
    message = "internal logic error"


class InvalidAddressError(RollappError):
    codespace = "sdk"
    code = 7
    message = "invalid address"


# Errors reported by the query service.


class InvalidRequestError(RollappError):
    codespace = "grpc"
    code = 3
    message = "invalid request"


class NotFoundError(RollappError):
    codespace = "grpc"
    code = 5
    message = "not found"


class InternalError(RollappError):
    codespace = "grpc"
    code = 13
    message = ""


# Errors of the rollapp module itself.


class RollappExistsError(RollappError):
    code = 1000
    message = "rollapp already exist for this rollapp-id; must use new rollapp-id"


class InvalidMaxSequencersError(RollappError):
    code = 1001
    message = "invalid max sequencers"


class InvalidMaxWithholdingError(RollappError):
    code = 1002
    message = "invalid max withholding"


class InvalidPermissionedAddressError(RollappError):
    code = 1003
    message = "invalid permissioned address"


class PermissionedAddressesDuplicateError(RollappError):
    code = 1004
    message = "permissioned-address has duplicates"


class InvalidNumBlocksError(RollappError):
    code = 1005
    message = "invalid number of blocks"


class InvalidBlockSequenceError(RollappError):
    code = 1006
    message = "invalid block sequence"


class UnknownRollappIDError(RollappError):
    code = 1007
    message = "rollapp does not exist"


class VersionMismatchError(RollappError):
    code = 1008
    message = "rollapp version mismatch"


class WrongBlockHeightError(RollappError):
    code = 1009
    message = "start-height does not match rollapps state"


class MultiUpdateStateInBlockError(RollappError):
    code = 1010
    message = "only one state update can take place per block"


class InvalidStateRootError(RollappError):
    code = 1011
    message = "invalid blocks state root"


class InvalidIntermediateStatesRootError(RollappError):
    code = 1012
    message = "invalid blocks intermediate states root"


class UnauthorizedRollappCreatorError(RollappError):
    code = 1013
    message = "rollapp creator not register in whitelist"


class InvalidClientTypeError(RollappError):
    code = 1014
    message = "client type of the rollapp isn't dymint"


class HeightStateNotFinalizedError(RollappError):
    code = 1015
    message = "rollapp block on this height was not finalized yet"


class InvalidAppHashError(RollappError):
    code = 1016
    message = "the app hash is different from the finalized state root"


class StateNotExistsError(RollappError):
    code = 1017
    message = "state of this height doesn't exist"


class InvalidHeightError(RollappError):
    code = 1018
    message = "invalid rollapp height"


class RollappCreatorExceedMaximumRollappsError(RollappError):
    code = 1019
    message = "rollapp creator exceed maximum allowed rollapps as register in whitelist"


class InvalidRollappIDError(RollappError):
    code = 1020
    message = "invalid rollapp-id"