# ecanode

Building blocks for a node of a distributed Event-Condition-Action (ECA)
engine. A node reacts to changes through ECA rules and exchanges remote
tasks with the other nodes through a transactional, two-phase-commit style
protocol. This package provides the rule model, the coordination of reads
and writes on a node's resources, the agent interface with an in-process
mock, the protocol messages and the routing of transaction responses.

It has no dependencies beyond the Python standard library (Python 3.10 or
later).

## Installation

```
pip install .
```

Install the `test` extra to get the test dependencies:

```
pip install ".[test]"
```

## Modules

- `ecanode.ecarule`: the rule model. `Rule` (name, events, local and
  remote tasks), `Action` (an assignment and the resource it assigns),
  `LocalTask`, `RemoteTask`, the `RuleDict` collection (rules indexed by
  name, with `has`, `insert`, `empty` and `add`) and the abstract `Parser`
  interface.
- `ecanode.coordinator`: `Coordinator`, which lets remote transactions read
  resources while local updates write them. Only one write is in progress
  at a time. A pessimistic write waits for the readers of its resources to
  leave; an optimistic write aborts the readers that were not yet confirmed
  and waits only for the prepared ones.
- `ecanode.agent`: the abstract `Agent` interface, `AgentError`,
  `Operation` (a payload plus the command/reply exchange between agent and
  node) and `MockAgent`, an in-process agent whose only peer is the node it
  serves.
- `ecanode.builtins`: functions usable in rules; `abs_int` returns the
  absolute value of a 64-bit integer (the minimum value maps to itself) and
  raises `TypeError` for non-integers.
- `ecanode.messages`: protocol messages. `Node`, `TransactionInfo` (with
  `id()` and `bury_participants()`), `Message` with JSON `marshal()` and
  `unmarshal()` (raising `ValueError` on invalid data), plus `agent_id` and
  `filter_participants`.
- `ecanode.demux`: `TransactionChannels`, the bounded response lines of one
  transaction, and `ResponseDemultiplexer`, which delivers each received
  response to the line of its transaction and discards the rest.

## Examples

Coordinating a read and a write:

```python
from ecanode.coordinator import Coordinator

c = Coordinator()
key = c.request_read({"temperature"})
assert c.confirm_read(key)
c.close_read(key)

c.request_write(False)            # pessimistic write
c.fix_working_set_write({"temperature"})
c.confirm_write()
c.close_write()
```

A transaction through the mock agent, with the node's side in a thread:

```python
import threading
from ecanode.agent import MockAgent

agent = MockAgent()
agent.start()
operations = agent.received_actions()

def node():
    op = operations.get()
    op.reply("interested")
    assert op.next_command() == "can_commit?"
    op.reply("prepared")
    assert op.next_command() == "do_commit"
    op.reply("done")

worker = threading.Thread(target=node)
worker.start()
agent.for_all(b"payload")
worker.join()
agent.stop()
```

Messages and response routing:

```python
from ecanode.messages import Message, Node, TransactionInfo
from ecanode.demux import ResponseDemultiplexer, TransactionChannels

msg = Message(
    type="interested",
    sender=Node(name="n1", meta=b"agent-1"),
    transaction=TransactionInfo(initiator="n0", number=3),
)
assert Message.unmarshal(msg.marshal()) == msg

demux = ResponseDemultiplexer()
channels = TransactionChannels("n0", 3)
demux.register(channels)
assert demux.dispatch(msg)
assert channels.are_interested.get_nowait() == "n1"
```

Rules:

```python
from ecanode.ecarule import Rule, RuleDict

rules = RuleDict()
rules.insert(Rule("heat", events=["temperature"]))
assert rules.has("heat")
```

## What this package does not do

- It does not store a node's resources: there is no resource container.
- It has no tokenizer or parser for the rule language; `Parser` is only an
  interface for one to implement.
- It has no networked agent: `MockAgent` is the only `Agent`, and there is
  no group membership or gossip. The messages and the demultiplexer are the
  pieces such an agent would use.
- It has no executor tying rules, resources and agents together, no
  logging configuration and no command-line program.

## Running the tests

```
pytest
```