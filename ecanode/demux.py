"""Routing of transaction responses to the transactions coordinated by an agent."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field

from .messages import Message, agent_id

# Capacity of each response line; responses beyond it are discarded.
MSG_BUFF_LEN = 10


def _line() -> queue.Queue[str]:
    return queue.Queue(maxsize=MSG_BUFF_LEN)


@dataclass(eq=False)
class TransactionChannels:
    """Lines on which a coordinator receives the responses of the participants.

    Each line carries the names of the nodes that gave the corresponding response.
    """

    initiator: str
    number: int
    are_interested: queue.Queue[str] = field(default_factory=_line)
    are_uninterested: queue.Queue[str] = field(default_factory=_line)
    are_prepared: queue.Queue[str] = field(default_factory=_line)
    have_aborted: queue.Queue[str] = field(default_factory=_line)
    have_committed: queue.Queue[str] = field(default_factory=_line)

    def id(self) -> str:
        """Identifier of the transaction these lines belong to."""
        return f"{self.initiator}->{self.number}"

    def line(self, response: str) -> queue.Queue[str] | None:
        """The line for the given response type, or None if there is no such response."""
        return {
            "interested": self.are_interested,
            "not_interested": self.are_uninterested,
            "prepared": self.are_prepared,
            "aborted": self.have_aborted,
            "committed": self.have_committed,
        }.get(response)


class ResponseDemultiplexer:
    """Delivers each received response to the lines of its transaction."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lines: dict[str, TransactionChannels] = {}
        self._lock = threading.Lock()
        self._logger = logger or logging.getLogger("ecanode.demux")

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def __contains__(self, transaction_id: object) -> bool:
        with self._lock:
            return transaction_id in self._lines

    def register(self, channels: TransactionChannels) -> None:
        """Start routing the responses of the transaction of channels to them."""
        with self._lock:
            self._lines[channels.id()] = channels

    def unregister(self, initiator: str, number: int) -> None:
        """Stop routing the responses of the given transaction; later ones are discarded."""
        with self._lock:
            self._lines.pop(f"{initiator}->{number}", None)

    def dispatch(self, message: Message) -> bool:
        """Pass the sender's name to the line of the response; report whether it was delivered."""
        if message.sender is None:
            raise ValueError("response has no sender")
        sender = agent_id(message.sender)
        with self._lock:
            channels = self._lines.get(message.transaction.id())
        if channels is None:
            self._logger.debug(
                "Transaction already terminated: discarding response from %s", sender
            )
            return False
        line = channels.line(message.type)
        if line is None:
            self._logger.warning("Discarded %s response from %s", message.type, sender)
            return False
        try:
            line.put_nowait(message.sender.name)
        except queue.Full:
            self._logger.warning("Discarded %s response from %s", message.type, sender)
            return False
        self._logger.debug("Received: %s from %s", message.type, sender)
        return True