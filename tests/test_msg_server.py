import pytest

from rollappstate.addresses import acc_address_to_bech32
from rollappstate.errors import (
    LogicError,
    MultiUpdateStateInBlockError,
    RollappCreatorExceedMaximumRollappsError,
    RollappExistsError,
    UnauthorizedRollappCreatorError,
    UnknownRollappIDError,
    VersionMismatchError,
    WrongBlockHeightError,
)
from rollappstate.hooks import RollappHooks
from rollappstate.keeper import Keeper
from rollappstate.messages import MsgCreateRollapp, MsgUpdateState
from rollappstate.model import (
    BlockDescriptor,
    BlockHeightToFinalizationQueue,
    DeployerParams,
    Rollapp,
    RollappSummary,
    StateInfo,
    StateInfoIndex,
    StateStatus,
)
from rollappstate.msg_server import MsgServer
from rollappstate.params import Params
from rollappstate.queries import QueryAllRollappRequest, QueryGetRollappRequest, QueryService
from rollappstate.store import Context, PageRequest


def _address(n):
    return acc_address_to_bech32(bytes([n]) * 20)


ALICE = _address(0xA1)
BOB = _address(0xB2)
CAROL = _address(0xC3)


class _UnknownSequencer(Exception):
    pass


class _SequencerGate(RollappHooks):
    """Accepts updates only from sequencers registered for the rollapp."""

    def __init__(self):
        self.sequencers = {}
        self.calls = []

    def before_update_state(self, ctx, seq_addr, rollapp_id):
        self.calls.append((seq_addr, rollapp_id))
        if self.sequencers.get(seq_addr) != rollapp_id:
            raise _UnknownSequencer(seq_addr)


@pytest.fixture
def ctx():
    return Context()


@pytest.fixture
def gate():
    return _SequencerGate()


@pytest.fixture
def keeper(gate):
    return Keeper().set_hooks(gate)


@pytest.fixture
def server(keeper):
    return MsgServer(keeper)


@pytest.fixture
def queries(keeper):
    return QueryService(keeper)


def _all_summaries(queries, ctx):
    result = {}
    total = 0
    next_key = b""
    while True:
        response = queries.rollapp_all(
            ctx, QueryAllRollappRequest(PageRequest(key=next_key, count_total=True))
        )
        if total == 0:
            total = response.pagination.total
        for summary in response.rollapp:
            result[summary.rollapp_id] = summary
        next_key = response.pagination.next_key
        if next_key is None:
            return result, total


def _create_msg(n, creator=ALICE):
    return MsgCreateRollapp(
        creator=creator,
        rollapp_id=f"rollapp{n}",
        max_withholding_blocks=1,
        max_sequencers=1,
        permissioned_addresses=[_address(j + 1) for j in range(n)],
    )


def _create_and_verify(server, queries, ctx, n, expected):
    msg = _create_msg(n)
    server.create_rollapp(ctx, msg)
    response = queries.rollapp(ctx, QueryGetRollappRequest(rollapp_id=msg.rollapp_id))
    assert response.rollapp == Rollapp(
        rollapp_id=msg.rollapp_id,
        creator=msg.creator,
        version=0,
        code_stamp="",
        genesis_path="",
        max_withholding_blocks=1,
        max_sequencers=1,
        permissioned_addresses=msg.permissioned_addresses,
    )
    expected.append(RollappSummary(rollapp_id=msg.rollapp_id))
    summaries, total = _all_summaries(queries, ctx)
    assert total == n + 1
    assert len(summaries) == len(expected)
    for summary in expected:
        assert summaries[summary.rollapp_id] == summary


# Creating rollapps


def test_create_rollapp(server, queries, ctx):
    expected = []
    for n in range(10):
        _create_and_verify(server, queries, ctx, n, expected)


def test_create_rollapp_from_whitelist(server, keeper, queries, ctx):
    keeper.set_params(ctx, Params(3, [DeployerParams(ALICE, 0)]))
    expected = []
    for n in range(10):
        _create_and_verify(server, queries, ctx, n, expected)


def test_create_rollapp_unauthorized_creator(server, keeper, ctx):
    keeper.set_params(ctx, Params(3, [DeployerParams(BOB, 0)]))
    for n in range(10):
        with pytest.raises(UnauthorizedRollappCreatorError) as info:
            server.create_rollapp(ctx, _create_msg(n))
        assert str(info.value) == "rollapp creator not register in whitelist"
    assert keeper.all_rollapps(ctx) == []


def test_create_rollapp_already_exists(server, ctx):
    msg = MsgCreateRollapp(
        creator=ALICE, rollapp_id="rollapp1", max_withholding_blocks=1, max_sequencers=1
    )
    server.create_rollapp(ctx, msg)
    with pytest.raises(RollappExistsError) as info:
        server.create_rollapp(ctx, msg)
    assert str(info.value) == "rollapp already exist for this rollapp-id; must use new rollapp-id"


def test_create_rollapp_exceed_max_rollapps(server, keeper, queries, ctx):
    keeper.set_params(ctx, Params(3, [DeployerParams(ALICE, 10)]))
    expected = []
    for n in range(10):
        _create_and_verify(server, queries, ctx, n, expected)
    with pytest.raises(RollappCreatorExceedMaximumRollappsError):
        server.create_rollapp(ctx, _create_msg(10))
    assert len(keeper.all_rollapps(ctx)) == 10


# Updating state


def _register(keeper, gate, ctx, rollapp=None):
    rollapp = rollapp or Rollapp(rollapp_id="rollapp1", creator=ALICE, version=3, max_sequencers=1)
    keeper.set_rollapp(ctx, rollapp)
    gate.sequencers[BOB] = rollapp.rollapp_id
    return rollapp


def _update(start_height, num_blocks, heights=None, version=3, rollapp_id="rollapp1"):
    heights = heights if heights is not None else range(start_height, start_height + num_blocks)
    return MsgUpdateState(
        creator=BOB,
        rollapp_id=rollapp_id,
        start_height=start_height,
        num_blocks=num_blocks,
        version=version,
        bds=[BlockDescriptor(height=h) for h in heights],
    )


def test_first_update_state(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    assert keeper.get_latest_state_info_index(ctx, "rollapp1") is None
    server.update_state(ctx, _update(1, 3, heights=[1, 1, 2]))
    latest = keeper.get_latest_state_info_index(ctx, "rollapp1")
    assert latest.index == 1
    assert gate.calls == [(BOB, "rollapp1")]


def test_update_state_sequence_and_finalization_queue(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    dispute_period = keeper.dispute_period_in_blocks(ctx)
    server.update_state(ctx, _update(1, 3))
    for i in range(10):
        ctx = ctx.with_block_height(ctx.block_height + 1)
        latest = keeper.get_latest_state_info_index(ctx, "rollapp1")
        assert latest.index == i + 1
        info = keeper.get_state_info(ctx, "rollapp1", latest.index)
        assert info.status == StateStatus.RECEIVED
        finalization = info.creation_height + dispute_period
        assert keeper.get_block_height_to_finalization_queue(ctx, finalization) == (
            BlockHeightToFinalizationQueue(finalization, [latest])
        )
        start = info.start_height + info.num_blocks
        server.update_state(
            ctx, _update(start, 2, heights=[info.start_height, info.start_height + 1])
        )
    final = keeper.get_state_info(ctx, "rollapp1", 11)
    assert final.creation_height == 10
    assert final.start_height == 22


def test_update_state_stores_state_info_and_event(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    msg = _update(1, 2)
    msg.da_path = "da/path"
    server.update_state(ctx, msg)
    assert keeper.get_state_info(ctx, "rollapp1", 1) == StateInfo(
        state_info_index=StateInfoIndex("rollapp1", 1),
        sequencer=BOB,
        start_height=1,
        num_blocks=2,
        da_path="da/path",
        version=3,
        creation_height=0,
        status=StateStatus.RECEIVED,
        bds=[BlockDescriptor(height=1), BlockDescriptor(height=2)],
    )
    event = ctx.events[-1]
    assert event.type == "state_update"
    assert event.attribute("rollapp_id") == "rollapp1"
    assert event.attribute("state_info_index") == "1"
    assert event.attribute("start_height") == "1"
    assert event.attribute("num_blocks") == "2"
    assert event.attribute("da_path") == "da/path"


def test_update_state_queues_share_finalization_height(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    keeper.set_rollapp(ctx, Rollapp(rollapp_id="rollapp2", version=3))
    server.update_state(ctx, _update(1, 1))
    gate.sequencers[BOB] = "rollapp2"
    server.update_state(ctx, _update(1, 1, rollapp_id="rollapp2"))
    queue = keeper.get_block_height_to_finalization_queue(ctx, 3)
    assert queue.finalization_queue == [StateInfoIndex("rollapp1", 1), StateInfoIndex("rollapp2", 1)]


def test_update_state_unknown_rollapp(server, ctx):
    with pytest.raises(UnknownRollappIDError) as info:
        server.update_state(ctx, _update(1, 3, version=0))
    assert str(info.value) == "rollapp does not exist"


def test_update_state_version_mismatch(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    with pytest.raises(VersionMismatchError) as info:
        server.update_state(ctx, _update(1, 3, version=0))
    assert str(info.value) == (
        "rollappId(rollapp1) current version is 3, but got 0: rollapp version mismatch"
    )


def test_update_state_hook_rejection_propagates(server, keeper, ctx):
    keeper.set_rollapp(ctx, Rollapp(rollapp_id="rollapp1", creator=ALICE, version=3))
    with pytest.raises(_UnknownSequencer):
        server.update_state(ctx, _update(1, 3))
    assert keeper.get_latest_state_info_index(ctx, "rollapp1") is None


def test_update_state_unpermissioned_sequencer(server, keeper, gate, ctx):
    _register(
        keeper,
        gate,
        ctx,
        Rollapp(rollapp_id="rollapp1", creator=ALICE, version=3, permissioned_addresses=[CAROL]),
    )
    with pytest.raises(LogicError) as info:
        server.update_state(ctx, _update(1, 3))
    assert "unpermissioned sequencer" in str(info.value)


def test_first_update_state_wrong_height_zero(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    with pytest.raises(WrongBlockHeightError) as info:
        server.update_state(ctx, _update(0, 3, heights=[0, 1]))
    assert str(info.value).startswith("expected height 1, but received (0)")


def test_first_update_state_wrong_height(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    with pytest.raises(WrongBlockHeightError):
        server.update_state(ctx, _update(2, 3, heights=[2, 3]))


def _seed_first_state(keeper):
    def seed(ctx):
        keeper.set_latest_state_info_index(ctx, StateInfoIndex("rollapp1", 1))
        keeper.set_state_info(
            ctx,
            StateInfo(
                state_info_index=StateInfoIndex("rollapp1", 1),
                sequencer=BOB,
                start_height=1,
                num_blocks=3,
                creation_height=0,
                status=StateStatus.RECEIVED,
                bds=[BlockDescriptor(height=h) for h in (1, 2, 3)],
            ),
        )

    return seed


def test_update_state_wrong_block_height(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    _seed_first_state(keeper)(ctx)
    ctx = ctx.with_block_height(1)
    with pytest.raises(WrongBlockHeightError) as info:
        server.update_state(ctx, _update(2, 3))
    assert str(info.value) == (
        "expected height (4), but received (2): start-height does not match rollapps state"
    )


def test_update_state_missing_state_info(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    keeper.set_latest_state_info_index(ctx, StateInfoIndex("rollapp1", 1))
    with pytest.raises(LogicError) as info:
        server.update_state(ctx, _update(1, 3))
    assert "missing stateInfo for state-index (1) of rollappId(rollapp1)" in str(info.value)


def test_update_state_multi_update_in_block(server, keeper, gate, ctx):
    _register(keeper, gate, ctx)
    _seed_first_state(keeper)(ctx)
    with pytest.raises(MultiUpdateStateInBlockError):
        server.update_state(ctx, _update(3, 3))


def test_update_state_check_tx_skips_delivery_checks(server, keeper, gate):
    ctx = Context(is_check_tx=True)
    _register(keeper, gate, ctx)
    _seed_first_state(keeper)(ctx)
    server.update_state(ctx, _update(3, 3))
    assert keeper.get_latest_state_info_index(ctx, "rollapp1") == StateInfoIndex("rollapp1", 2)