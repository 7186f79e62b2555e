"""Agents connecting a node to the other nodes, and an in-process mock agent."""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod


class AgentError(Exception):
    """Raised when an agent is used in a state that does not allow the call."""


class Operation:
    """A transaction offered to a node: its payload and the command exchange with the agent.

    The agent sends commands ("can_commit?", "do_commit", "do_abort") and the
    node replies ("interested", "not_interested", "prepared", "aborted", "done").
    """

    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self._commands: queue.Queue[str] = queue.Queue()
        self._replies: queue.Queue[str] = queue.Queue()

    def command(self, command: str) -> None:
        """Send a command to the node (agent side)."""
        self._commands.put(command)

    def next_reply(self, timeout: float | None = None) -> str:
        """Wait for the next reply of the node (agent side)."""
        return self._replies.get(timeout=timeout)

    def reply(self, message: str) -> None:
        """Send a reply to the agent (node side)."""
        self._replies.put(message)

    def next_command(self, timeout: float | None = None) -> str:
        """Wait for the next command of the agent (node side)."""
        return self._commands.get(timeout=timeout)


class Agent(ABC):
    """Transactional communication with the other nodes."""

    @abstractmethod
    def start(self) -> None:
        """Start the agent; raises AgentError if it is already running."""

    @abstractmethod
    def join(self) -> None:
        """Join the group of nodes."""

    @abstractmethod
    def for_all(self, payload: bytes) -> None:
        """Offer payload to all the other nodes as a single transaction."""

    @abstractmethod
    def received_actions(self) -> queue.Queue[Operation | None]:
        """Operations received from other nodes; None marks that the agent stopped."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the agent; raises AgentError if it is not running."""

    @abstractmethod
    def is_running(self) -> bool:
        """Whether the agent is running."""

    @abstractmethod
    def set_log_level(self, level: int) -> None:
        """Set the verbosity of the agent."""


class MockAgent(Agent):
    """An agent whose only peer is the node it serves."""

    def __init__(self) -> None:
        self._running = False
        self._lock = threading.Lock()
        self._operations: queue.Queue[Operation | None] = queue.Queue()

    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                raise AgentError("agent is already running")
            self._running = True

    def join(self) -> None:
        if not self._running:
            raise AgentError("agent is not running")

    def for_all(self, payload: bytes) -> None:
        if not self._running:
            raise AgentError("agent is not running")
        if not payload:
            return
        operation = Operation(bytes(payload))
        self._operations.put(operation)
        if operation.next_reply() == "interested":
            operation.command("can_commit?")
            if operation.next_reply() == "prepared":
                operation.command("do_commit")
                operation.next_reply()

    def received_actions(self) -> queue.Queue[Operation | None]:
        return self._operations

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                raise AgentError("agent is not running")
            self._operations.put(None)
            self._running = False

    def set_log_level(self, level: int) -> None:
        """The mock agent does not log."""