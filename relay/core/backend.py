"""
Client for the external analysis backend.
Sends one payload per event and pulls the comment text out of the answer.
"""
import logging
import os
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from relay.core.errors import BackendError, ConfigurationError
from relay.core.github.models import BackendPayload, BackendResponse

logger = logging.getLogger(__name__)


def extract_comment(data: Any) -> Optional[str]:
    """
    Return the backend's comment, or None if it is missing, not a string or blank.
    The text is returned verbatim; only the blank check looks at whitespace.
    """
    try:
        response = BackendResponse.model_validate(data)
    except ValidationError:
        logger.info("Backend response has no comment, skipping.")
        return None

    if not response.comment.strip():
        logger.info("Backend returned empty comment, skipping.")
        return None
    return response.comment


class BackendNotifier:
    """
    Posts BackendPayload objects to BACKEND_URL.
    notify() never raises; every failure is logged and reported as "no comment".
    """

    def __init__(self, backend_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.backend_url = backend_url
        self.transport = transport

    def _resolve_url(self) -> str:
        backend_url = self.backend_url or os.getenv("BACKEND_URL")
        if not backend_url:
            raise ConfigurationError("BACKEND_URL is not set in environment variables")
        return backend_url

    async def _send(self, backend_url: str, payload: BackendPayload) -> Any:
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(backend_url, json=payload.model_dump(mode="json"))
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise BackendError(f"Backend answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise BackendError(f"Backend request failed: {e}") from e
        except ValueError as e:
            raise BackendError(f"Backend response is not JSON: {e}") from e

    async def notify(self, payload: BackendPayload) -> Optional[str]:
        """
        Send the payload to the backend.

        Args:
            payload: Event payload for the backend

        Returns:
            Comment text to post, or None
        """
        try:
            backend_url = self._resolve_url()
        except ConfigurationError as e:
            logger.error(str(e))
            return None

        logger.info(
            f"Sending {payload.kind} payload for {payload.repo_full_name}#{payload.pr_number} "
            f"({len(payload.files)} files) to backend"
        )

        try:
            data = await self._send(backend_url, payload)
        except BackendError as e:
            logger.error(f"Error calling backend: {e}")
            return None

        return extract_comment(data)
