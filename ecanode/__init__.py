"""Building blocks for a distributed Event-Condition-Action engine node: rules, coordination, agents and transaction messages."""

__version__ = "0.1.0"

__all__ = [
    "ecarule",
    "coordinator",
    "agent",
    "builtins",
    "messages",
    "demux",
]