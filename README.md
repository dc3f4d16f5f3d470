# chainboard

`chainboard` holds the building blocks of a data node for a message board
whose state is kept consistent by chain replication: the board's
entities, an in-memory table with pending changes that are confirmed or
cancelled later, the buffers that let a node replay what a neighbour
missed, the state machine of a node's place in the chain, and the
handshake two neighbours perform when they connect.

It has no dependencies outside the standard library and needs Python
3.10 or later.

## Messages (`chainboard.messages`)

The records that travel between nodes, as dataclasses:

- `Operation` – `CREATE`, `UPDATE` or `DELETE`.
- `UserRecord`, `TopicRecord`, `LikeRecord`, `MessageRecord` – wire forms
  of the entities; a `MessageRecord` also carries a `likes` count.
- `DataMessage` – one replicated operation: a payload, `message_index`,
  `request_id` and `op`. `payload_kind()` returns `"user"`, `"message"`,
  `"topic"`, `"like"` or `None`.
- `Confirmation` – `message_index`, `request_id`, `ok` and `error`.
- `DatabaseSnapshot` – lists of users, topics, messages and likes plus an
  `op_count`.

## Storage (`chainboard.storage`)

- `entities` – `User`, `Topic`, `Message` and `Like`, all subclasses of
  `Entity`, which carries the `id`. `unique_fields(entity_type)` names the
  fields that take part in the unique constraint (a user's or topic's
  name; a like's user and message; a message's topic, user and creation
  time). `datalink_to_entity` and `entity_to_datalink` convert between
  entities and `DataMessage`s; an unknown payload raises `ValueError`.
- `keys` – `struct_hash(obj, fields)`, a 64-bit FNV-1a hash over named
  fields, and `Index`, which tracks used ids and unique-field hashes.
  `add` raises `DuplicateIdError` or `ConstraintError`; `remove`,
  `replace` and `reset` complete it.
- `record` – `MutableRecord` keeps a confirmed value and at most one
  pending ("dirty") value, which `commit` makes permanent and `rollback`
  discards. `SnapshotRecord` is a read-only copy. State errors derive from
  `RecordError`: `UninitializedError`, `DeletedError` (which keeps the
  deleted value) and `NotDirtyError`.
- `relation` – `Relation(entity_type)` is a table of records keyed by id.
  `insert`, `delete` and `update` return an `InsertReceipt`,
  `DeleteReceipt` or `UpdateReceipt`; the change becomes visible when the
  receipt is confirmed and is undone when it is cancelled. Reads go
  through `get` (which raises `NotFoundError` for missing records and for
  records with a pending change), `get_predicate(predicate, limit)`
  (`limit` 0 means no limit; a negative limit raises `ValueError`),
  `get_all`, `count` and `get_transform`. A transform that fails raises
  `TransformError`; one that changes the id raises `IdChangedError`.
  `import_records` fills an empty relation with confirmed entities.

```python
from chainboard.storage.entities import User
from chainboard.storage.relation import Relation

users = Relation(User)
receipt = users.insert(User("alice", id=1))
receipt.confirm()
assert users.get(1).name == "alice"
```

## Chain (`chainboard.chain`)

- `buffer` – `ReplayBuffer(size)` keeps the latest items in strictly
  increasing `message_index` order. `add` raises `IndexOutOfOrderError`;
  `last_message_index` and `messages_after` raise
  `NoBufferedMessagesError` when there is nothing to give, and
  `messages_after` raises `IncompleteResultError` (carrying what it has)
  when items directly after the index are missing. `clear_before` drops
  older items.
- `state` – `NodeDFA` tracks a node's `NodeState`: its `Position` (head,
  middle, tail, single) and `Role` (relay, reader, confirmer,
  reader-confirmer). `emit(event)` applies an `Event` and puts the new
  state on the queue returned by `states()`; an impossible move raises
  `IllegalTransitionError` and leaves the state unchanged. A new machine
  starts as a single reader-confirmer.
- `observer` – `BufferedInterceptor` numbers incoming messages with an
  `OpCounter`, buffers messages and confirmations, ignores duplicates and
  passes the rest to a wrapped interceptor. It also provides what both
  sides of the handshake need: last indexes (-1 when empty), the items
  after an index, processing of received batches, and snapshots that
  carry the operation count.
- `stream` – `Supervisor` sends items from an outbound queue through a
  bidirectional stream and puts received items on an inbound queue.
  `run(stream, stop)` blocks until the stream fails or `stop` is set and
  always ends by raising a `StreamError` (`StreamCancelled` when
  stopped). `dropped_message()` returns the item whose sending failed.
- `handshake` – `client_handshake` and `server_handshake` run the
  exchange between a predecessor (client) and its successor (server):
  `ClientHello` and `ServerHello`, then either the missing messages
  (`ClientSync`) and confirmations (`ServerSync`) or a full
  `DatabaseSnapshot` when the successor has no messages.
  `run_handshake` drives the four steps of `ClientHandshake` or
  `ServerHandshake` in order. An unexpected message raises
  `HandshakeError`.

## Configuration (`chainboard.config`)

`load(argv)` parses a node's options into a `NodeConfig`: `-id`
(default `data-node`), `-service`, `-chain` and `-control` (addresses,
default `:0`), `-token` and `-o` (log path), each also accepted with two
dashes.

## What this package does not do

The pieces above are not wired into a running node. The package has no
network transport or server, no component that turns board operations
into replicated messages and applies them to relations, no database
facade with the board's operations, no loop that runs a node in its
current role, no control interface for switching a node's successor or
role, and no command to start a node. `load` reads options but nothing in
the package acts on them.

## Tests

The test suite uses pytest, installed with the `test` extra.