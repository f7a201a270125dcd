"""Handlers for the rollapp module's transaction messages."""

from __future__ import annotations

from .errors import (
    LogicError,
    MultiUpdateStateInBlockError,
    RollappCreatorExceedMaximumRollappsError,
    RollappExistsError,
    UnauthorizedRollappCreatorError,
    UnknownRollappIDError,
    VersionMismatchError,
    WrongBlockHeightError,
)
from .keeper import Keeper
from .messages import MsgCreateRollapp, MsgUpdateState
from .model import (
    ATTRIBUTE_KEY_DA_PATH,
    ATTRIBUTE_KEY_NUM_BLOCKS,
    ATTRIBUTE_KEY_ROLLAPP_ID,
    ATTRIBUTE_KEY_START_HEIGHT,
    ATTRIBUTE_KEY_STATE_INFO_INDEX,
    EVENT_TYPE_STATE_UPDATE,
    BlockDescriptor,
    BlockHeightToFinalizationQueue,
    Event,
    Rollapp,
    StateInfo,
    StateInfoIndex,
    StateStatus,
)
from .store import Context


class MsgServer:
    """Applies create-rollapp and update-state messages to the keeper's state."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def create_rollapp(self, ctx: Context, msg: MsgCreateRollapp) -> None:
        keeper = self.keeper
        if keeper.get_rollapp(ctx, msg.rollapp_id) is not None:
            raise RollappExistsError()

        whitelist = keeper.deployer_whitelist(ctx)
        if whitelist:
            entry = next((d for d in whitelist if d.address == msg.creator), None)
            if entry is None:
                raise UnauthorizedRollappCreatorError()
            if entry.max_rollapps > 0:
                created = sum(1 for r in keeper.all_rollapps(ctx) if r.creator == msg.creator)
                if created >= entry.max_rollapps:
                    raise RollappCreatorExceedMaximumRollappsError()

        keeper.set_rollapp(
            ctx,
            Rollapp(
                rollapp_id=msg.rollapp_id,
                creator=msg.creator,
                version=0,
                code_stamp=msg.code_stamp,
                genesis_path=msg.genesis_path,
                max_withholding_blocks=msg.max_withholding_blocks,
                max_sequencers=msg.max_sequencers,
                permissioned_addresses=list(msg.permissioned_addresses),
            ),
        )

    def update_state(self, ctx: Context, msg: MsgUpdateState) -> None:
        """Record a sequencer's batch of blocks and queue it for finalization.

        Registered hooks run before the update is accepted; without hooks none run.
        """
        keeper = self.keeper
        rollapp = keeper.get_rollapp(ctx, msg.rollapp_id)
        if rollapp is None:
            raise UnknownRollappIDError()

        if rollapp.version != msg.version:
            raise VersionMismatchError(
                f"rollappId({msg.rollapp_id}) current version is {rollapp.version}, "
                f"but got {msg.version}"
            )

        if keeper.hooks is not None:
            keeper.hooks.before_update_state(ctx, msg.creator, msg.rollapp_id)

        permissioned = rollapp.permissioned_addresses
        if permissioned and msg.creator not in permissioned:
            raise LogicError(
                f"unpermissioned sequencer ({msg.creator}) is registered "
                f"for rollappId({msg.rollapp_id})"
            )

        latest = keeper.get_latest_state_info_index(ctx, msg.rollapp_id)
        if latest is None:
            if msg.start_height != 1:
                raise WrongBlockHeightError(
                    f"expected height 1, but received ({msg.start_height})"
                )
            new_index = 1
        else:
            previous = keeper.get_state_info(ctx, msg.rollapp_id, latest.index)
            if previous is None:
                raise LogicError(
                    f"missing stateInfo for state-index ({latest.index}) "
                    f"of rollappId({msg.rollapp_id})"
                )
            if not ctx.is_check_tx and not ctx.is_recheck_tx:
                if previous.creation_height == ctx.block_height:
                    raise MultiUpdateStateInBlockError()
                expected_start = previous.start_height + previous.num_blocks
                if expected_start != msg.start_height:
                    raise WrongBlockHeightError(
                        f"expected height ({expected_start}), "
                        f"but received ({msg.start_height})"
                    )
            new_index = latest.index + 1

        state_info_index = StateInfoIndex(msg.rollapp_id, new_index)
        keeper.set_latest_state_info_index(ctx, state_info_index)
        keeper.set_state_info(
            ctx,
            StateInfo(
                state_info_index=state_info_index,
                sequencer=msg.creator,
                start_height=msg.start_height,
                num_blocks=msg.num_blocks,
                da_path=msg.da_path,
                version=msg.version,
                creation_height=ctx.block_height,
                status=StateStatus.RECEIVED,
                bds=[
                    BlockDescriptor(bd.height, bd.state_root, bd.intermediate_states_root)
                    for bd in msg.bds
                ],
            ),
        )

        finalization_height = ctx.block_height + keeper.dispute_period_in_blocks(ctx)
        pending = keeper.get_block_height_to_finalization_queue(ctx, finalization_height)
        queue = (pending.finalization_queue if pending is not None else []) + [state_info_index]
        keeper.set_block_height_to_finalization_queue(
            ctx, BlockHeightToFinalizationQueue(finalization_height, queue)
        )

        ctx.emit_event(
            Event(
                EVENT_TYPE_STATE_UPDATE,
                (
                    (ATTRIBUTE_KEY_ROLLAPP_ID, msg.rollapp_id),
                    (ATTRIBUTE_KEY_STATE_INFO_INDEX, str(state_info_index.index)),
                    (ATTRIBUTE_KEY_START_HEIGHT, str(msg.start_height)),
                    (ATTRIBUTE_KEY_NUM_BLOCKS, str(msg.num_blocks)),
                    (ATTRIBUTE_KEY_DA_PATH, msg.da_path),
                ),
            )
        )