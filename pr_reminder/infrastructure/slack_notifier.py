"""Slack incoming webhook client implementation."""
import asyncio
import logging
from typing import Any, Dict, Optional
import aiohttp
from pr_reminder.domain.notifier_interface import INotifier


logger = logging.getLogger(__name__)


def build_payload(message: str, channel: str, display_name: str, icon: str) -> Dict[str, Any]:
    """Build the JSON body accepted by a Slack incoming webhook."""
    return {
        "channel": channel,
        "username": display_name,
        "icon_emoji": icon,
        "text": message,
    }


class SlackWebhookNotifier(INotifier):
    """Posts messages to Slack through an incoming webhook.

    Implements the INotifier port. The HTTP session is created on first
    use and shared by concurrent posts.
    """

    def __init__(self, webhook_url: Optional[str], timeout_seconds: int = 10, dry_run: bool = False):
        """Initialize Slack notifier.

        Args:
            webhook_url: Slack incoming webhook URL
            timeout_seconds: Total timeout for each post
            dry_run: Log messages instead of sending them
        """
        if not webhook_url and not dry_run:
            raise ValueError("A webhook URL is required unless dry_run is set")
        self._webhook_url = webhook_url
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._dry_run = dry_run
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def post(self, message: str, channel: str, display_name: str, icon: str) -> bool:
        """Post a message to a channel.

        Returns:
            True on a 2xx response, False otherwise
        """
        if self._dry_run:
            logger.info(f"[DRY-RUN] Would post to {channel} as {display_name}:\n{message}")
            return True

        session = await self._get_session()
        payload = build_payload(message, channel, display_name, icon)

        async with session.post(self._webhook_url, json=payload) as response:
            if 200 <= response.status < 300:
                logger.debug(f"Message sent to {channel}")
                return True
            body = (await response.text()).strip()[:500]
            logger.warning(
                f"Slack webhook rejected message for {channel} "
                f"(status {response.status}): {body}"
            )
            return False

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
