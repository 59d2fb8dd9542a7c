"""HTTP client adapter for trigger endpoints."""

import logging
from types import TracebackType

import aiohttp

from local_scheduler.ports.http import TriggerRequest, TriggerResponse

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)


class HttpClient:
    """HTTP client that POSTs to trigger endpoints.

    Features:
    - One aiohttp session per process, closed by the context manager.
    - Response body read inside the request so callers get a plain DTO.
    - No retries; the transport's default timeout applies.
    """

    def __init__(self) -> None:
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    async def post(self, req: TriggerRequest) -> TriggerResponse:
        """Send one HTTP POST and read the full response.

        A JSON body (with Content-Type: application/json) is sent only when
        ``req.payload`` is not None.

        Args:
            req: Trigger request.

        Returns:
            Status, reason and body text of the response.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp.ClientError: Network, DNS or payload errors.
            asyncio.TimeoutError: If the transport times out.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        headers = dict(req.headers)
        kwargs: dict[str, object] = {}
        if req.payload is not None:
            headers["Content-Type"] = "application/json"
            kwargs["json"] = req.payload

        logger.debug(f"POST {req.url}")
        async with self.session.post(req.url, headers=headers, **kwargs) as resp:
            text = await resp.text(errors="replace")
            return TriggerResponse(status=resp.status, reason=resp.reason or "", text=text)
