"""Messages exchanged by agents while handling transactions."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Responses that a participant sends back to the coordinator of a transaction.
TRANSACTION_RESPONSES = frozenset(
    {"interested", "not_interested", "prepared", "aborted", "committed"}
)
# Requests that a coordinator sends to the participants of a transaction.
TRANSACTION_REQUESTS = frozenset(
    {"interested?", "can_commit?", "do_commit", "do_abort", "get_decision"}
)


def _lower_keys(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Field lookup ignoring case, the way the wire format is decoded."""
    return {key.lower(): value for key, value in obj.items()}


def _encode_bytes(data: bytes | None) -> str | None:
    return None if data is None else base64.b64encode(data).decode("ascii")


def _decode_bytes(value: Any, what: str) -> bytes | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as err:
        raise ValueError(f"{what} is not valid base64: {err}") from None


def _decode_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _decode_int(value: Any, what: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer")
    return value


def _decode_object(value: Any, what: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object")
    return _lower_keys(value)


@dataclass(frozen=True)
class Node:
    """A member of the group: its unique name, address and metadata (the agent id)."""

    name: str
    addr: str = ""
    port: int = 0
    meta: bytes = b""

    def to_json(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "Addr": self.addr,
            "Port": self.port,
            "Meta": _encode_bytes(self.meta),
        }

    @classmethod
    def from_json(cls, obj: Any) -> Node | None:
        fields = _decode_object(obj, "Sender")
        if fields is None:
            return None
        return cls(
            name=_decode_str(fields.get("name"), "Name"),
            addr=_decode_str(fields.get("addr"), "Addr"),
            port=_decode_int(fields.get("port"), "Port"),
            meta=_decode_bytes(fields.get("meta"), "Meta") or b"",
        )


def agent_id(node: Node) -> str:
    """The agent id carried by the node's metadata."""
    return node.meta.decode("utf-8", errors="replace")


def filter_participants(local_name: str, nodes: Iterable[Node]) -> list[Node]:
    """All the nodes except the one named local_name, in their order."""
    return [node for node in nodes if node.name != local_name]


@dataclass
class TransactionInfo:
    """Identity, payload and participants of a transaction.

    initiator_id and coordinated are local bookkeeping and never travel on the wire.
    """

    initiator: str = ""
    number: int = 0
    payload: bytes | None = None
    participants: list[str] | None = None
    initiator_id: str | None = field(default=None, compare=False)
    coordinated: bool = field(default=False, compare=False)

    def id(self) -> str:
        """Identifier of the transaction, unique within the group."""
        return f"{self.initiator}->{self.number}"

    def bury_participants(self, members: Iterable[Node]) -> None:
        """Drop the participants that are not among the alive members, keeping their order."""
        alive = {member.name for member in members}
        self.participants = [p for p in self.participants or [] if p in alive]

    def to_json(self) -> dict[str, Any]:
        return {
            "Initiator": self.initiator,
            "Number": self.number,
            "Payload": _encode_bytes(self.payload),
            "Participants": None if self.participants is None else list(self.participants),
        }

    @classmethod
    def from_json(cls, obj: Any) -> TransactionInfo:
        fields = _decode_object(obj, "Transaction")
        if fields is None:
            return cls()
        participants = fields.get("participants")
        if participants is not None:
            if not isinstance(participants, list) or not all(
                isinstance(p, str) for p in participants
            ):
                raise ValueError("Participants must be a list of strings")
            participants = list(participants)
        return cls(
            initiator=_decode_str(fields.get("initiator"), "Initiator"),
            number=_decode_int(fields.get("number"), "Number"),
            payload=_decode_bytes(fields.get("payload"), "Payload"),
            participants=participants,
        )


@dataclass
class Message:
    """Any message exchanged by agents."""

    type: str = ""
    sender: Node | None = None
    transaction: TransactionInfo = field(default_factory=TransactionInfo)

    def marshal(self) -> bytes:
        """Encode the message as JSON bytes."""
        obj = {
            "Type": self.type,
            "Sender": None if self.sender is None else self.sender.to_json(),
            "Transaction": self.transaction.to_json(),
        }
        return json.dumps(obj, separators=(",", ":")).encode("utf-8")

    @classmethod
    def unmarshal(cls, data: bytes | str) -> Message:
        """Decode a message; raises ValueError if data is not a valid message."""
        try:
            obj = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise ValueError(f"invalid message: {err}") from None
        fields = _decode_object(obj, "message")
        if fields is None:
            return cls()
        return cls(
            type=_decode_str(fields.get("type"), "Type"),
            sender=Node.from_json(fields.get("sender")),
            transaction=TransactionInfo.from_json(fields.get("transaction")),
        )

    @property
    def is_response(self) -> bool:
        """Whether this is a participant's response to a coordinator."""
        return self.type in TRANSACTION_RESPONSES

    @property
    def is_request(self) -> bool:
        """Whether this is a coordinator's request to a participant."""
        return self.type in TRANSACTION_REQUESTS