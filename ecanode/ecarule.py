"""Event-Condition-Action rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Action:
    """An assignment together with the name of the resource it assigns."""

    assignment: Any
    resource: str

    def __str__(self) -> str:
        return str(self.assignment)


@dataclass
class LocalTask:
    """A task allowed to modify only local resources."""

    condition: Any = None
    actions: list[Action] = field(default_factory=list)


@dataclass
class RemoteTask:
    """A task updating the resources of the other nodes.

    Remote resources are prefixed with "this." and local ones with "ext.".
    """

    condition: str
    actions: list[str] = field(default_factory=list)
    remote_resources: list[str] = field(default_factory=list)
    local_resources: list[str] = field(default_factory=list)


@dataclass
class Rule:
    """A rule activated when any of its event resources changes value."""

    name: str
    events: list[str] = field(default_factory=list)
    local_tasks: list[LocalTask] = field(default_factory=list)
    remote_tasks: list[RemoteTask] = field(default_factory=list)


class RuleDict(dict):
    """Rules indexed by name."""

    def has(self, name: str) -> bool:
        return name in self

    def insert(self, rule: Rule) -> None:
        self[rule.name] = rule

    def empty(self) -> bool:
        return len(self) == 0

    def add(self, other: Mapping[str, Rule] | None) -> None:
        """Add all rules of other, replacing rules with the same name."""
        if other:
            self.update(other)


class Parser(ABC):
    """Parser of rules, expressions, actions and received tasks; raises on syntax errors."""

    @abstractmethod
    def parse(self, *rules: str) -> list[Rule]:
        """Parse a series of rules."""

    @abstractmethod
    def parse_expressions(self, *expressions: str) -> list[Any]:
        """Parse a series of local expressions."""

    @abstractmethod
    def parse_actions(self, actions: str) -> list[Action]:
        """Parse a series of local actions."""

    @abstractmethod
    def parse_remote_tasks(
        self, remote_types: Mapping[str, str], *tasks: RemoteTask
    ) -> list[LocalTask]:
        """Parse received tasks into local tasks that can be executed."""