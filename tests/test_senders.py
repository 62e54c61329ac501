#!/usr/bin/env python3
"""Tests for HTTP push and email senders."""

import json

import httpx
import pytest

from alerting.senders import ExpoPushSender, LogEmailSender, ResendEmailSender


def client_for(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestResendEmailSender:
    """Tests for ResendEmailSender."""

    def test_success(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"id": "email-1"})

        sender = ResendEmailSender("key-123", "Alerts <a@farm.com>", client=client_for(handler))
        assert sender.send("manager@farm.com", "Subject", "<p>hi</p>") is True

        body = json.loads(requests[0].content)
        assert body == {
            "from": "Alerts <a@farm.com>",
            "to": ["manager@farm.com"],
            "subject": "Subject",
            "html": "<p>hi</p>",
        }
        assert requests[0].headers["Authorization"] == "Bearer key-123"

    def test_rejected_returns_false(self):
        def handler(request):
            return httpx.Response(422, json={"message": "invalid to"})

        sender = ResendEmailSender("key", "a@farm.com", client=client_for(handler))
        assert sender.send("bad", "Subject", "<p>hi</p>") is False

    def test_network_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        sender = ResendEmailSender("key", "a@farm.com", client=client_for(handler))
        assert sender.send("manager@farm.com", "Subject", "<p>hi</p>") is False


class TestExpoPushSender:
    """Tests for ExpoPushSender."""

    def test_sends_one_message_per_token(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"data": []})

        sender = ExpoPushSender(["tok-1", "tok-2"], client=client_for(handler))
        sender.send("Urgent maintenance", "body", {"alertId": "a"})

        messages = json.loads(requests[0].content)
        assert [m["to"] for m in messages] == ["tok-1", "tok-2"]
        assert messages[0]["title"] == "Urgent maintenance"
        assert messages[0]["data"] == {"alertId": "a"}

    def test_no_tokens_sends_nothing(self):
        def handler(request):
            raise AssertionError("should not be called")

        ExpoPushSender([], client=client_for(handler)).send("t", "b")

    def test_server_error_raises(self):
        def handler(request):
            return httpx.Response(500)

        sender = ExpoPushSender(["tok-1"], client=client_for(handler))
        with pytest.raises(httpx.HTTPStatusError):
            sender.send("t", "b")


class TestLogSenders:
    def test_log_email_sender_succeeds(self):
        assert LogEmailSender().send("a@b.c", "s", "<p></p>") is True
