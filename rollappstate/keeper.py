"""Keeper: typed access to the rollapp module's stored records and parameters."""

from __future__ import annotations

from typing import Any

from .hooks import RollappHooks
from .keys import (
    BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX,
    LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX,
    LATEST_STATE_INFO_INDEX_KEY_PREFIX,
    MODULE_NAME,
    ROLLAPP_KEY_PREFIX,
    STATE_INFO_KEY_PREFIX,
    block_height_to_finalization_queue_key,
    key_prefix,
    latest_finalized_state_index_key,
    latest_state_info_index_key,
    rollapp_key,
    state_info_key,
)
from .model import (
    BlockHeightToFinalizationQueue,
    DeployerParams,
    Rollapp,
    StateInfo,
    StateInfoIndex,
)
from .params import (
    KEY_DEPLOYER_WHITELIST,
    KEY_DISPUTE_PERIOD_IN_BLOCKS,
    Params,
    default_params,
)
from .store import Context, PrefixStore

_PARAMS_PREFIX = b"params/" + MODULE_NAME.encode() + b"/"


class Keeper:
    """Reads and writes rollapp records in a context's store.

    The given params are in effect until set_params stores others in a context.
    """

    def __init__(self, params: Params | None = None) -> None:
        self._params = params if params is not None else default_params()
        self.hooks: RollappHooks | None = None

    def set_hooks(self, hooks: RollappHooks) -> "Keeper":
        if self.hooks is not None:
            raise RuntimeError("cannot set rollapp hooks twice")
        self.hooks = hooks
        return self

    @staticmethod
    def _store(ctx: Context, prefix: str) -> PrefixStore:
        return PrefixStore(ctx.store, key_prefix(prefix))

    @staticmethod
    def _all(ctx: Context, prefix: str) -> list[Any]:
        return [value for _, value in Keeper._store(ctx, prefix).items()]

    # Rollapps

    def set_rollapp(self, ctx: Context, rollapp: Rollapp) -> None:
        self._store(ctx, ROLLAPP_KEY_PREFIX).set(rollapp_key(rollapp.rollapp_id), rollapp)

    def get_rollapp(self, ctx: Context, rollapp_id: str) -> Rollapp | None:
        return self._store(ctx, ROLLAPP_KEY_PREFIX).get(rollapp_key(rollapp_id))

    def remove_rollapp(self, ctx: Context, rollapp_id: str) -> None:
        self._store(ctx, ROLLAPP_KEY_PREFIX).delete(rollapp_key(rollapp_id))

    def all_rollapps(self, ctx: Context) -> list[Rollapp]:
        return self._all(ctx, ROLLAPP_KEY_PREFIX)

    # State infos

    def set_state_info(self, ctx: Context, state_info: StateInfo) -> None:
        self._store(ctx, STATE_INFO_KEY_PREFIX).set(
            state_info_key(state_info.state_info_index), state_info
        )

    def get_state_info(self, ctx: Context, rollapp_id: str, index: int) -> StateInfo | None:
        return self._store(ctx, STATE_INFO_KEY_PREFIX).get(
            state_info_key(StateInfoIndex(rollapp_id, index))
        )

    def remove_state_info(self, ctx: Context, rollapp_id: str, index: int) -> None:
        self._store(ctx, STATE_INFO_KEY_PREFIX).delete(
            state_info_key(StateInfoIndex(rollapp_id, index))
        )

    def all_state_infos(self, ctx: Context) -> list[StateInfo]:
        return self._all(ctx, STATE_INFO_KEY_PREFIX)

    # Index of the latest state update of each rollapp

    def set_latest_state_info_index(self, ctx: Context, state_info_index: StateInfoIndex) -> None:
        self._store(ctx, LATEST_STATE_INFO_INDEX_KEY_PREFIX).set(
            latest_state_info_index_key(state_info_index.rollapp_id), state_info_index
        )

    def get_latest_state_info_index(self, ctx: Context, rollapp_id: str) -> StateInfoIndex | None:
        return self._store(ctx, LATEST_STATE_INFO_INDEX_KEY_PREFIX).get(
            latest_state_info_index_key(rollapp_id)
        )

    def remove_latest_state_info_index(self, ctx: Context, rollapp_id: str) -> None:
        self._store(ctx, LATEST_STATE_INFO_INDEX_KEY_PREFIX).delete(
            latest_state_info_index_key(rollapp_id)
        )

    def all_latest_state_info_indexes(self, ctx: Context) -> list[StateInfoIndex]:
        return self._all(ctx, LATEST_STATE_INFO_INDEX_KEY_PREFIX)

    # Index of the latest finalized state of each rollapp

    def set_latest_finalized_state_index(
        self, ctx: Context, state_info_index: StateInfoIndex
    ) -> None:
        self._store(ctx, LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX).set(
            latest_finalized_state_index_key(state_info_index.rollapp_id), state_info_index
        )

    def get_latest_finalized_state_index(
        self, ctx: Context, rollapp_id: str
    ) -> StateInfoIndex | None:
        return self._store(ctx, LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX).get(
            latest_finalized_state_index_key(rollapp_id)
        )

    def remove_latest_finalized_state_index(self, ctx: Context, rollapp_id: str) -> None:
        self._store(ctx, LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX).delete(
            latest_finalized_state_index_key(rollapp_id)
        )

    def all_latest_finalized_state_indexes(self, ctx: Context) -> list[StateInfoIndex]:
        return self._all(ctx, LATEST_FINALIZED_STATE_INDEX_KEY_PREFIX)

    # States waiting for finalization, by the height they finalize at

    def set_block_height_to_finalization_queue(
        self, ctx: Context, queue: BlockHeightToFinalizationQueue
    ) -> None:
        self._store(ctx, BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX).set(
            block_height_to_finalization_queue_key(queue.finalization_height), queue
        )

    def get_block_height_to_finalization_queue(
        self, ctx: Context, finalization_height: int
    ) -> BlockHeightToFinalizationQueue | None:
        return self._store(ctx, BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX).get(
            block_height_to_finalization_queue_key(finalization_height)
        )

    def remove_block_height_to_finalization_queue(
        self, ctx: Context, finalization_height: int
    ) -> None:
        self._store(ctx, BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX).delete(
            block_height_to_finalization_queue_key(finalization_height)
        )

    def all_block_height_to_finalization_queues(
        self, ctx: Context
    ) -> list[BlockHeightToFinalizationQueue]:
        return self._all(ctx, BLOCK_HEIGHT_TO_FINALIZATION_QUEUE_KEY_PREFIX)

    # Parameters

    @staticmethod
    def _params_store(ctx: Context) -> PrefixStore:
        return PrefixStore(ctx.store, _PARAMS_PREFIX)

    def get_params(self, ctx: Context) -> Params:
        return Params(self.dispute_period_in_blocks(ctx), self.deployer_whitelist(ctx))

    def set_params(self, ctx: Context, params: Params) -> None:
        """Validate and store the parameters in the context's store."""
        params.validate()
        store = self._params_store(ctx)
        store.set(KEY_DISPUTE_PERIOD_IN_BLOCKS, params.dispute_period_in_blocks)
        store.set(KEY_DEPLOYER_WHITELIST, list(params.deployer_whitelist))

    def dispute_period_in_blocks(self, ctx: Context) -> int:
        value = self._params_store(ctx).get(KEY_DISPUTE_PERIOD_IN_BLOCKS)
        return self._params.dispute_period_in_blocks if value is None else value

    def deployer_whitelist(self, ctx: Context) -> list[DeployerParams]:
        value = self._params_store(ctx).get(KEY_DEPLOYER_WHITELIST)
        if value is None:
            return [
                DeployerParams(d.address, d.max_rollapps) for d in self._params.deployer_whitelist
            ]
        return value