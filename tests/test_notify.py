import types

import discord
import pytest
import requests

from endfield import notify
from endfield.errors import NotificationError
from endfield.report import RunReport

WEBHOOK = "https://discord.com/api/webhooks/123/abc"


class DummyWebhook:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, **kwargs):
        self.sent.append(kwargs)
        if self.error:
            raise self.error


@pytest.fixture
def webhook(monkeypatch):
    hook = DummyWebhook()
    created = []

    def from_url(url, session=None):
        created.append(url)
        return hook

    monkeypatch.setattr(notify.discord.SyncWebhook, "from_url", staticmethod(from_url))
    hook.created = created
    return hook


def sample_report():
    report = RunReport()
    report.debug("----- CHECKING IN FOR ACCOUNT 1 -----")
    report.info("Account 1: Found 1 role(s)")
    report.error("  → Alpha (Lv.20) [Asia]: claim rejected")
    return report


@pytest.mark.parametrize("url, expected", [
    (WEBHOOK, True),
    ("  HTTPS://DISCORD.COM/api/webhooks/1/x ", True),
    ("https://example.com/hook", False),
    ("", False),
    (None, False),
])
def test_is_discord_webhook(url, expected):
    assert notify.is_discord_webhook(url) is expected


def test_build_content_with_mention():
    content = notify.DiscordNotifier(WEBHOOK, "42").build_content(sample_report())

    assert content == (
        "<@42>\n"
        "**Endfield Daily Check-in**\n"
        "(INFO) Account 1: Found 1 role(s)\n"
        "(ERROR)   → Alpha (Lv.20) [Asia]: claim rejected"
    )


def test_build_content_is_truncated():
    report = RunReport()
    for i in range(200):
        report.info(f"line {i} " + "x" * 20)

    content = notify.DiscordNotifier(WEBHOOK).build_content(report)

    assert len(content) == 2000
    assert content.endswith("…")


def test_send_report_posts_content(webhook):
    report = sample_report()

    assert notify.send_report(report, WEBHOOK, "42") is True

    assert webhook.created == [WEBHOOK]
    assert webhook.sent[0]["wait"] is False
    assert webhook.sent[0]["content"].startswith("<@42>\n**Endfield Daily Check-in**")
    assert report.entries[-1].text == "Successfully sent message to Discord webhook!"


def test_send_report_skips_foreign_url(webhook):
    report = RunReport()

    assert notify.send_report(report, "https://example.com/hook") is False
    assert webhook.sent == []
    assert not report.has_errors


def test_send_report_records_http_error(webhook):
    response = types.SimpleNamespace(status=404, reason="Not Found")
    webhook.error = discord.NotFound(response, "Unknown Webhook")
    report = RunReport()

    assert notify.send_report(report, WEBHOOK) is False
    assert report.has_errors
    assert "HTTP 404" in report.entries[-1].text


def test_notifier_wraps_network_errors(webhook):
    webhook.error = requests.ConnectionError("down")

    with pytest.raises(NotificationError, match="unreachable"):
        notify.DiscordNotifier(WEBHOOK).send(RunReport())


class DummySession:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_own_session_is_closed_after_send(webhook, monkeypatch):
    monkeypatch.setattr(notify.requests, "Session", DummySession)
    notifier = notify.DiscordNotifier(WEBHOOK)

    notifier.send(sample_report())

    assert notifier.session.closed


def test_own_session_is_closed_after_failure(webhook, monkeypatch):
    monkeypatch.setattr(notify.requests, "Session", DummySession)
    webhook.error = discord.HTTPException(types.SimpleNamespace(status=500, reason="Server Error"), "oops")
    notifier = notify.DiscordNotifier(WEBHOOK)

    with pytest.raises(NotificationError, match="HTTP 500"):
        notifier.send(sample_report())

    assert notifier.session.closed


def test_given_session_is_left_open(webhook):
    session = DummySession()

    notify.DiscordNotifier(WEBHOOK, session=session).send(sample_report())

    assert not session.closed
