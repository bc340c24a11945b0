"""HTTP client the notifier uses to trigger ticket summarization"""
from typing import Any, Dict, Optional
import httpx

from ..domain.errors import UpstreamError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class HttpSummarizeClient:
    """Calls POST /api/v1/tickets/{id}/summarize on behalf of a subscriber"""

    def __init__(
        self,
        base_url: str,
        session_token: Optional[str],
        timeout: float = 90.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._session_token = session_token
        self._timeout = timeout
        self._transport = transport

    async def __call__(self, ticket_id: str) -> Dict[str, Any]:
        return await self.summarize(ticket_id)

    async def summarize(self, ticket_id: str) -> Dict[str, Any]:
        """
        Request a summary for a ticket

        Returns:
            Response body ({success, summary, outcome})

        Raises:
            UpstreamError: Transport failure or non-2xx response
        """
        headers = {}
        if self._session_token:
            headers["Authorization"] = f"Bearer {self._session_token}"

        url = f"{self._base_url}/api/v1/tickets/{ticket_id}/summarize"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Summarize request failed: {e}", extra={"ticket_id": ticket_id})
            raise UpstreamError("Summary service unreachable", details={"reason": str(e)})

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            message = body.get("error") if isinstance(body, dict) else None
            logger.warning(
                f"Summarize returned {response.status_code}",
                extra={"ticket_id": ticket_id}
            )
            raise UpstreamError(
                message or f"Summary request failed with status {response.status_code}",
                details={"status_code": response.status_code}
            )
        if not isinstance(body, dict):
            logger.warning("Summarize returned a non-object body", extra={"ticket_id": ticket_id})
            raise UpstreamError("Unexpected summary response", details={"status_code": response.status_code})
        return body
