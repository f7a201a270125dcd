# rollappstate

`rollappstate` keeps a registry of rollapps and the state updates that their sequencers submit. All state lives in memory. The package is a library and has no command-line entry point.

It is made of these modules:

- `rollappstate.messages`: the `MsgCreateRollapp` and `MsgUpdateState` messages, with their stateless checks (`validate_basic`), signers and sign bytes.
- `rollappstate.store`: an ordered in-memory `KVStore`, `PrefixStore` views over it, the block `Context`, and `paginate` with `PageRequest` / `PageResponse`.
- `rollappstate.keeper`: the `Keeper`. It stores and reads rollapps, state infos, the latest and latest-finalized state indexes, finalization queues and module parameters.
- `rollappstate.msg_server`: the `MsgServer`, which applies messages to the keeper's state.
- `rollappstate.queries`: the `QueryService` and its request and response types.
- `rollappstate.genesis`: `GenesisState` and `default_genesis()`.
- `rollappstate.params`: `Params` and `default_params()`.
- `rollappstate.hooks`: `RollappHooks` and `MultiRollappHooks`.
- `rollappstate.addresses`: Bech32 encoding and decoding, and account addresses with the `dym` prefix.
- `rollappstate.model`: the stored records and the `Event` type.
- `rollappstate.keys`: the store key layouts.
- `rollappstate.errors`: the error classes.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install ".[test]"
pytest
```

## Usage

```python
from rollappstate.addresses import acc_address_to_bech32
from rollappstate.keeper import Keeper
from rollappstate.messages import MsgCreateRollapp
from rollappstate.msg_server import MsgServer
from rollappstate.params import default_params
from rollappstate.queries import QueryGetRollappRequest, QueryService
from rollappstate.store import Context

keeper = Keeper(default_params())
ctx = Context()
server = MsgServer(keeper)
queries = QueryService(keeper)

creator = acc_address_to_bech32(bytes(range(20)))  # a made-up "dym1..." address

msg = MsgCreateRollapp(
    creator=creator,
    rollapp_id="rollapp1",
    max_withholding_blocks=1,
    max_sequencers=1,
)
msg.validate_basic()
server.create_rollapp(ctx, msg)

response = queries.rollapp(ctx, QueryGetRollappRequest(rollapp_id="rollapp1"))
print(response.rollapp)
```

### Parameters

`Keeper(params)` uses the given parameters until `Keeper.set_params` validates new ones and stores them in a context's store.

The parameters are:

- `dispute_period_in_blocks`: defaults to 3, with a minimum of 1.
- `deployer_whitelist`: a list of `DeployerParams`.

When the whitelist is not empty, `create_rollapp` has two extra checks:

- It accepts only creators that are on the list.
- A positive `max_rollapps` caps how many rollapps that creator may register.

### State updates

`MsgServer.update_state` accepts an update only when all of the following hold:

- the rollapp exists and the versions match;
- any hooks registered with `Keeper.set_hooks` pass (`set_hooks` may be called only once);
- the creator is in the rollapp's permissioned addresses, if it has any;
- the start height follows on from the previous update;
- no other update for the rollapp was recorded at the current block height.

The start-height and same-block checks are skipped when `is_check_tx` or `is_recheck_tx` is set on the context.

An accepted update does three things:

- it stores a `StateInfo` with status `RECEIVED` under the next index;
- it appends that index to the finalization queue for `block_height + dispute_period_in_blocks`;
- it emits a `state_update` event into `ctx.events`.

### Queries

`QueryService` offers these queries:

- `rollapp` and `rollapp_all` (paginated);
- `state_info` and `state_info_all` (paginated, filtered by rollapp id);
- `latest_state_index`;
- `params`.

`state_info` looks up a state by index or by rollapp height. When neither is given, it returns the latest state, or the latest finalized state if `finalized` is set. `find_state_info_by_height` searches for the state info whose block range contains a given height.

Pagination works like this:

- It goes either by `offset` or by `key`.
- A `limit` of 0 means 100, and in that case the total is also counted.

### Errors

These raise subclasses of `rollappstate.errors.RollappError`:

- message checks;
- the `MsgServer`;
- the `QueryService`, for example `UnknownRollappIDError`, `WrongBlockHeightError` and `NotFoundError`.

Each error carries a `codespace`, a numeric `code`, a fixed `message` and an optional `detail`.

These raise plain `ValueError` or `TypeError` instead:

- parameter validation, including `Keeper.set_params`;
- genesis validation;
- address parsing.

### Genesis

`default_genesis()` returns an empty genesis state with the default parameters. `GenesisState.validate()` raises `ValueError` in either of these cases:

- two entries of the same kind share a store key;
- the parameters are invalid.

## What it does not do

- Nothing moves a state from `RECEIVED` to `FINALIZED`. The finalization queues are written, but no end-of-block processing reads them.
- State is not persisted. It lives only in the `KVStore` of a `Context`.
- The package has no network server or command-line interface. Messages and queries are plain method calls.
- It does not check sequencers itself. Sequencer registration checks are left to whatever hooks are registered.