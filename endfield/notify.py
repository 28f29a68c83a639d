import logging
from typing import Optional

import discord
import requests

from endfield.constants import DISCORD_CONTENT_LIMIT, DISCORD_WEBHOOK_PREFIX
from endfield.errors import NotificationError
from endfield.report import RunReport

logger = logging.getLogger(__name__)

TITLE = "**Endfield Daily Check-in**"


def is_discord_webhook(url: Optional[str]) -> bool:
    return bool(url) and url.strip().lower().startswith(DISCORD_WEBHOOK_PREFIX)


class DiscordNotifier:
    """Sends the run report as plain content to a Discord webhook."""

    def __init__(self, url: str, user_id: Optional[str] = None, session: Optional[requests.Session] = None):
        self.url = url.strip()
        self.user_id = user_id
        self._owns_session = session is None
        self.session = session or requests.Session()

    def build_content(self, report: RunReport) -> str:
        content = ""
        if self.user_id:
            content = f"<@{self.user_id}>\n"
        content += TITLE + "\n"
        content += report.render()

        if len(content) > DISCORD_CONTENT_LIMIT:
            content = content[:DISCORD_CONTENT_LIMIT - 1] + "…"
        return content

    def send(self, report: RunReport) -> None:
        """
        Post the report; wait=False makes Discord answer 204 No Content on success

        Raises:
            NotificationError: the webhook URL is invalid or Discord refused the message
        """
        # Discord only answers a wait=False post with 204 No Content; any
        # non-2xx status is raised by discord.py as HTTPException.
        try:
            webhook = discord.SyncWebhook.from_url(self.url, session=self.session)
            webhook.send(
                content=self.build_content(report),
                wait=False,
                allowed_mentions=discord.AllowedMentions(users=True),
            )
        except ValueError as e:
            raise NotificationError(f"Invalid Discord webhook URL: {e}") from e
        except discord.HTTPException as e:
            raise NotificationError(f"Discord webhook returned HTTP {e.status}: {e.text}") from e
        except requests.RequestException as e:
            raise NotificationError(f"Discord webhook unreachable: {e}") from e
        finally:
            if self._owns_session:
                self.session.close()


def send_report(report: RunReport, url: Optional[str], user_id: Optional[str] = None) -> bool:
    """
    Deliver the report when a Discord webhook is configured

    Outcomes are appended to the report itself.

    Returns:
        True if Discord accepted the message
    """
    report.debug("----- DISCORD WEBHOOK -----")
    if not is_discord_webhook(url):
        report.debug("No valid DISCORD_WEBHOOK configured, skipping webhook send")
        return False

    try:
        DiscordNotifier(url, user_id).send(report)
    except NotificationError as e:
        report.error(f"Error sending message to Discord webhook: {e}")
        return False

    report.info("Successfully sent message to Discord webhook!")
    return True
