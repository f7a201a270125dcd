"""Read-only queries over the rollapp module's state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .errors import (
    InternalError,
    InvalidHeightError,
    InvalidRequestError,
    LogicError,
    NotFoundError,
    StateNotExistsError,
    UnknownRollappIDError,
)
from .keeper import Keeper
from .keys import ROLLAPP_KEY_PREFIX, STATE_INFO_KEY_PREFIX, key_prefix
from .model import (
    Rollapp,
    RollappSummary,
    StateInfo,
    StateInfoIndex,
    StateInfoSummary,
)
from .params import Params, default_params
from .store import Context, PageRequest, PageResponse, PrefixStore, paginate


@dataclass
class QueryGetLatestStateIndexRequest:
    rollapp_id: str = ""
    finalized: bool = False


@dataclass
class QueryGetLatestStateIndexResponse:
    state_index: StateInfoIndex = field(default_factory=StateInfoIndex)


@dataclass
class QueryParamsRequest:
    pass


@dataclass
class QueryParamsResponse:
    params: Params = field(default_factory=default_params)


@dataclass
class QueryGetRollappRequest:
    rollapp_id: str = ""


@dataclass
class QueryGetRollappResponse:
    rollapp: Rollapp = field(default_factory=Rollapp)
    latest_state_index: StateInfoIndex | None = None
    latest_finalized_state_index: StateInfoIndex | None = None


@dataclass
class QueryAllRollappRequest:
    pagination: PageRequest | None = None


@dataclass
class QueryAllRollappResponse:
    rollapp: list[RollappSummary] = field(default_factory=list)
    pagination: PageResponse | None = None


@dataclass
class QueryGetStateInfoRequest:
    rollapp_id: str = ""
    index: int = 0
    height: int = 0
    finalized: bool = False


@dataclass
class QueryGetStateInfoResponse:
    state_info: StateInfo = field(default_factory=StateInfo)


@dataclass
class QueryAllStateInfoRequest:
    rollapp_id: str = ""
    pagination: PageRequest | None = None


@dataclass
class QueryAllStateInfoResponse:
    state_info: list[StateInfoSummary] = field(default_factory=list)
    pagination: PageResponse | None = None


def _contains(state_info: StateInfo, height: int) -> bool:
    return state_info.start_height <= height < state_info.start_height + state_info.num_blocks


class QueryService:
    """Answers queries about rollapps, their states and the module parameters."""

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    @staticmethod
    def _page(
        ctx: Context,
        prefix: str,
        pagination: PageRequest | None,
        on_item: Callable[[bytes, Any], None],
    ) -> PageResponse:
        try:
            return paginate(PrefixStore(ctx.store, key_prefix(prefix)), pagination, on_item)
        except ValueError as err:
            raise InternalError(str(err)) from err

    def latest_state_index(
        self, ctx: Context, request: QueryGetLatestStateIndexRequest | None
    ) -> QueryGetLatestStateIndexResponse:
        if request is None:
            raise InvalidRequestError()
        if request.finalized:
            value = self.keeper.get_latest_finalized_state_index(ctx, request.rollapp_id)
        else:
            value = self.keeper.get_latest_state_info_index(ctx, request.rollapp_id)
        if value is None:
            raise NotFoundError()
        return QueryGetLatestStateIndexResponse(state_index=value)

    def params(self, ctx: Context, request: QueryParamsRequest | None) -> QueryParamsResponse:
        if request is None:
            raise InvalidRequestError()
        return QueryParamsResponse(params=self.keeper.get_params(ctx))

    def rollapp(
        self, ctx: Context, request: QueryGetRollappRequest | None
    ) -> QueryGetRollappResponse:
        if request is None:
            raise InvalidRequestError()
        found = self.keeper.get_rollapp(ctx, request.rollapp_id)
        if found is None:
            raise NotFoundError()
        return QueryGetRollappResponse(
            rollapp=found,
            latest_state_index=self.keeper.get_latest_state_info_index(ctx, found.rollapp_id),
            latest_finalized_state_index=self.keeper.get_latest_finalized_state_index(
                ctx, found.rollapp_id
            ),
        )

    def rollapp_all(
        self, ctx: Context, request: QueryAllRollappRequest | None
    ) -> QueryAllRollappResponse:
        if request is None:
            raise InvalidRequestError()
        summaries: list[RollappSummary] = []

        def collect(_key: bytes, rollapp: Rollapp) -> None:
            summaries.append(
                RollappSummary(
                    rollapp_id=rollapp.rollapp_id,
                    latest_state_index=self.keeper.get_latest_state_info_index(
                        ctx, rollapp.rollapp_id
                    ),
                    latest_finalized_state_index=self.keeper.get_latest_finalized_state_index(
                        ctx, rollapp.rollapp_id
                    ),
                )
            )

        page = self._page(ctx, ROLLAPP_KEY_PREFIX, request.pagination, collect)
        return QueryAllRollappResponse(rollapp=summaries, pagination=page)

    def state_info_all(
        self, ctx: Context, request: QueryAllStateInfoRequest | None
    ) -> QueryAllStateInfoResponse:
        if request is None:
            raise InvalidRequestError()
        summaries: list[StateInfoSummary] = []

        def collect(_key: bytes, state_info: StateInfo) -> None:
            if state_info.state_info_index.rollapp_id == request.rollapp_id:
                summaries.append(state_info.summary())

        page = self._page(ctx, STATE_INFO_KEY_PREFIX, request.pagination, collect)
        return QueryAllStateInfoResponse(state_info=summaries, pagination=page)

    def state_info(
        self, ctx: Context, request: QueryGetStateInfoRequest | None
    ) -> QueryGetStateInfoResponse:
        if request is None:
            raise InvalidRequestError()
        rollapp_id = request.rollapp_id
        index = request.index

        if request.height == 0 and index == 0:
            if request.finalized:
                latest = self.keeper.get_latest_finalized_state_index(ctx, rollapp_id)
                if latest is None:
                    raise LogicError(
                        f"LatestFinalizedStateIndex wasn't found for rollappId={rollapp_id}"
                    )
            else:
                latest = self.keeper.get_latest_state_info_index(ctx, rollapp_id)
                if latest is None:
                    raise LogicError(f"LatestStateInfoIndex wasn't found for rollappId={rollapp_id}")
            index = latest.index

        state_info = StateInfo()
        if index != 0:
            found = self.keeper.get_state_info(ctx, rollapp_id, index)
            if found is None:
                raise NotFoundError()
            state_info = found
        elif request.height != 0:
            state_info = self.find_state_info_by_height(ctx, rollapp_id, request.height)
        return QueryGetStateInfoResponse(state_info=state_info)

    def _require_state_info(self, ctx: Context, rollapp_id: str, index: int) -> StateInfo:
        found = self.keeper.get_state_info(ctx, rollapp_id, index)
        if found is None:
            raise LogicError(f"StateInfo wasn't found for rollappId={rollapp_id}, index={index}")
        return found

    def find_state_info_by_height(self, ctx: Context, rollapp_id: str, height: int) -> StateInfo:
        """Return the state update whose block range holds the given height."""
        if height == 0:
            raise InvalidHeightError()
        if self.keeper.get_rollapp(ctx, rollapp_id) is None:
            raise UnknownRollappIDError()
        latest_index = self.keeper.get_latest_state_info_index(ctx, rollapp_id)
        if latest_index is None:
            raise LogicError(f"LatestStateInfoIndex wasn't found for rollappId={rollapp_id}")

        start_index = 1
        end_index = latest_index.index
        latest = self._require_state_info(ctx, rollapp_id, end_index)
        if height >= latest.start_height + latest.num_blocks:
            raise StateNotExistsError(f"rollappId={rollapp_id}, height={height}")
        if height >= latest.start_height:
            return latest

        max_steps = end_index - start_index + 1
        for _ in range(max_steps):
            if end_index <= start_index:
                raise LogicError(
                    "endInfoIndex should be != than startInfoIndex "
                    f"rollappId={rollapp_id}, startInfoIndex={start_index}, endInfoIndex={end_index}"
                )
            start_info = self._require_state_info(ctx, rollapp_id, start_index)
            end_info = self._require_state_info(ctx, rollapp_id, end_index)
            start_height = start_info.start_height
            end_height = end_info.start_height + end_info.num_blocks - 1

            if _contains(start_info, height):
                return start_info
            if _contains(end_info, height):
                return end_info

            avg_blocks_per_batch = (end_height - start_height + 1) // (end_index - start_index + 1)
            if avg_blocks_per_batch <= 0:
                raise LogicError(
                    f"avgBlocksPerBatch is zero!!! rollappId={rollapp_id}, endHeight={end_height}, "
                    f"startHeight={start_height}, endInfoIndex={end_index}, "
                    f"startInfoIndex={start_index}"
                )

            if height >= start_height:
                jump = max((height - start_height) // avg_blocks_per_batch, 1)
            else:
                jump = end_index
            candidate_index = min(start_index + jump, end_index)
            if candidate_index == end_index:
                candidate_index = end_index - 1
            candidate = self._require_state_info(ctx, rollapp_id, candidate_index)

            if candidate.start_height > height:
                end_index = candidate_index - 1
            elif candidate.start_height + candidate.num_blocks - 1 < height:
                start_index = candidate_index + 1
            else:
                return candidate

        raise LogicError(
            f"More searching steps than indexes! rollappId={rollapp_id}, "
            f"stepNum={max_steps}, maxNumberOfSteps={max_steps}"
        )