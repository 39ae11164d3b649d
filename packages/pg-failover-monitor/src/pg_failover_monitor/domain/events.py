"""Domain events announced to the rest of the system.

Events are immutable value objects. They follow the frozen dataclass pattern
used throughout the domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailoverEventType(Enum):
    """Types of events the monitor can announce.

    Attributes:
        DB_FAILOVER_EXECUTED: The application was cut over to a new primary.
    """

    DB_FAILOVER_EXECUTED = "db_failover_executed"


@dataclass(frozen=True)
class FailoverEvent:
    """Immutable event emitted once per successful failover episode.

    The event carries no payload beyond its type: its value is the fixed
    identifier understood by the notification channel.

    Attributes:
        event_type: The type of event that occurred.
    """

    event_type: FailoverEventType = FailoverEventType.DB_FAILOVER_EXECUTED

    @property
    def name(self) -> str:
        """Return the wire identifier of the event."""
        return self.event_type.value
