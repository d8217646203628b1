"""API client for the chatrecall context endpoints."""

import logging

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)


class ContextAPIClient:
    """Client for the ``find-context`` endpoints.

    Every call returns a dict.  Successful calls return the response
    body (``summary`` and ``messages``); failures return
    ``{"type": "error", "message": ..., "code": ...}``.
    """

    def __init__(self, config: CLIConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.client = httpx.AsyncClient(timeout=config.timeout, transport=transport)

    def _payload(self, query: str) -> dict:
        payload: dict = {"query": query}
        if self.config.room_id is not None:
            payload["roomId"] = self.config.room_id
        return payload

    async def find_context(self, query: str) -> dict:
        """Ask the server which recent messages *query* refers to."""
        url = self.config.context_url
        payload = self._payload(query)
        headers = {self.config.user_id_header: str(self.config.user_id)}

        logger.debug("Making request to %s with payload: %s", url, payload)

        try:
            response = await self.client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException:
            return {
                "type": "error",
                "message": "Request timed out.",
                "code": "TIMEOUT",
            }
        except httpx.ConnectError as e:
            return {
                "type": "error",
                "message": f"Connection error: {e}",
                "code": "CONNECTION_ERROR",
            }
        except httpx.TransportError as e:
            return {
                "type": "error",
                "message": f"Transport error: {type(e).__name__}: {e}",
                "code": "TRANSPORT_ERROR",
            }

        logger.debug("Response status: %s", response.status_code)
        logger.debug("Response headers: %s", dict(response.headers))

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code != 200:
            if isinstance(body, dict) and "code" in body:
                return {
                    "type": "error",
                    "message": str(body.get("detail", "")),
                    "code": str(body["code"]),
                }
            return {
                "type": "error",
                "message": f"HTTP {response.status_code}: {response.text}",
                "code": "HTTP_ERROR",
            }

        if not isinstance(body, dict):
            return {
                "type": "error",
                "message": "Server returned a non-JSON body.",
                "code": "BAD_RESPONSE",
            }
        return body

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
