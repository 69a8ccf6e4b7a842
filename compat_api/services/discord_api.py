"""Discord API client service"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class DiscordAPIClient:
    """Client for Discord webhooks and interaction follow-ups.

    Nothing here needs a bot token: channel posts go through an incoming
    webhook, and deferred interaction responses are edited through the
    interaction token.
    """

    DISCORD_API_URL = "https://discord.com/api/v10"

    def __init__(
        self,
        webhook_url: str,
        application_id: str,
        *,
        api_url: str = DISCORD_API_URL,
        http: httpx.AsyncClient | None = None,
    ):
        self.webhook_url = webhook_url.rstrip("/")
        self.application_id = application_id
        self.api_url = api_url.rstrip("/")

        # Shared HTTP client, reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    @property
    def is_configured(self) -> bool:
        """Check if a channel webhook is configured"""
        return bool(self.webhook_url)

    async def execute_webhook(self, payload: dict[str, Any], *, wait: bool = False) -> str | None:
        """Post a message through the webhook.

        Returns:
            The new message id when ``wait`` is set, else None
        """
        response = await self._http.post(
            self.webhook_url,
            params={"wait": "true"} if wait else None,
            json=payload,
        )
        if response.is_error:
            logger.error(f"Discord webhook failed: {response.status_code} {response.text}")
            response.raise_for_status()
        if wait:
            message_id: str | None = response.json().get("id")
            return message_id
        return None

    async def edit_webhook_message(self, message_id: str, payload: dict[str, Any]) -> None:
        """Edit a message previously posted by the webhook."""
        response = await self._http.patch(
            f"{self.webhook_url}/messages/{message_id}",
            json=payload,
        )
        if response.is_error:
            logger.error(
                f"Discord webhook edit failed ({message_id}): "
                f"{response.status_code} {response.text}"
            )
            response.raise_for_status()

    async def edit_original_response(self, interaction_token: str, payload: dict[str, Any]) -> None:
        """Replace the deferred placeholder of an interaction with the final message."""
        url = (
            f"{self.api_url}/webhooks/{self.application_id}/"
            f"{interaction_token}/messages/@original"
        )
        response = await self._http.patch(url, json=payload)
        if response.is_error:
            logger.error(
                f"Failed to edit interaction response: {response.status_code} {response.text}"
            )
            response.raise_for_status()
