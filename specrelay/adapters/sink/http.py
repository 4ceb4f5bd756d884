"""HTTP reporter sink.

Implements ReporterSinkPort by posting each event to a reporter
service. Delivery is fire-and-forget: failures are logged and never
interrupt the test run.
"""

import logging

import httpx

from specrelay.core.models import NormalizedEvent
from specrelay.core.ports import ReporterSinkPort

logger = logging.getLogger(__name__)


class HttpSinkAdapter(ReporterSinkPort):
    """Posts events to an HTTP endpoint."""

    def __init__(
        self,
        base_url: str,
        endpoint: str = "/events",
        timeout_seconds: float = 5.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ):
        """Initialize HTTP sink.

        Args:
            base_url: Base URL of the reporter service.
            endpoint: Path events are posted to.
            timeout_seconds: Per-request timeout.
            headers: Extra headers sent with every request.
            client: Preconfigured client (for custom transports).
        """
        self.base_url = base_url
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.headers = headers or {}
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={"Content-Type": "application/json", **self.headers},
                timeout=self.timeout_seconds,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def publish(self, event_name: str, payload: NormalizedEvent) -> None:
        body = {"event": event_name, "payload": payload.to_dict()}

        try:
            response = self._get_client().post(self.endpoint, json=body)
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to publish {event_name}: {e}",
                extra={"uid": payload.uid, "correlation_id": payload.correlation_id},
            )
            return

        if response.is_error:
            logger.error(
                f"Reporter rejected {event_name}: {response.status_code}",
                extra={"uid": payload.uid, "response": response.text},
            )
