"""HTTPX-based implementation of the EventEmitterPort.

This adapter posts failover events to a webhook URL.
"""

from __future__ import annotations

import httpx

from pg_failover_monitor.adapters.logging_adapter import StdlibLoggingAdapter
from pg_failover_monitor.adapters.ports import EventEmitterPort, LoggingPort
from pg_failover_monitor.domain.events import FailoverEvent


class HTTPXEventNotifier:
    """Posts ``{"event": <event name>}`` to a webhook.

    No acknowledgement is awaited beyond the HTTP exchange itself; transport
    errors and non-2xx responses are logged, never raised.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        logger: LoggingPort | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            url: Webhook receiving the events.
            timeout: Request timeout in seconds. Defaults to 10.0.
            logger: Port for reporting failures.
            client: Optional httpx.Client for dependency injection (testing).
                   If not provided, a new client is created per event.
        """
        self._url = url
        self._timeout = timeout
        self._logger = logger or StdlibLoggingAdapter()
        self._client = client

    def emit(self, event: FailoverEvent) -> None:
        """Post the event to the webhook."""
        payload = {"event": event.name}
        try:
            if self._client is not None:
                response = self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                with httpx.Client() as client:
                    response = client.post(self._url, json=payload, timeout=self._timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error(f"Failed to deliver event {event.name} to {self._url}: {e}")


# Runtime protocol check
assert isinstance(HTTPXEventNotifier("http://localhost"), EventEmitterPort)
