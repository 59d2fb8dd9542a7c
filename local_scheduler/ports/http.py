"""HTTP port definitions (DTOs)."""

import json
from dataclasses import dataclass, field
from typing import Any

__all__ = ["TriggerRequest", "TriggerResponse", "bearer_headers", "secret_headers"]

SECRET_HEADER = "X-Scheduler-Secret"


def secret_headers(secret: str) -> dict[str, str]:
    """Return the shared-secret authentication header."""
    return {SECRET_HEADER: secret}


def bearer_headers(token: str | None) -> dict[str, str]:
    """Return the bearer authentication header, or none when no token is set."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


@dataclass
class TriggerRequest:
    """HTTP POST to be sent to a trigger endpoint.

    Decouples core trigger logic from HTTP implementation details.

    Attributes:
        url: Target trigger endpoint URL.
        headers: Extra request headers (authentication).
        payload: JSON-serializable body, or None to send no body.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    payload: dict[str, Any] | None = None


@dataclass(slots=True, frozen=True)
class TriggerResponse:
    """Fully read HTTP response from a trigger endpoint.

    Attributes:
        status: HTTP status code.
        reason: HTTP reason phrase (may be empty).
        text: Raw response body.
    """

    status: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        """Return True for 2xx status codes."""
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON.
        """
        return json.loads(self.text)
