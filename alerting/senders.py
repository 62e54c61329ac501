"""Push notification and email delivery channels."""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
RESEND_API_URL = "https://api.resend.com/emails"
HTTP_TIMEOUT = 10.0


class PushSender:
    """Fires a device notification. Best effort, nothing is returned."""

    def send(self, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        raise NotImplementedError


class EmailSender:
    """Sends one HTML email to one recipient. Returns True on success."""

    def send(self, to: str, subject: str, html: str) -> bool:
        raise NotImplementedError


class LogPushSender(PushSender):
    def send(self, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        logger.info(f"Push: {title} - {body}")


class LogEmailSender(EmailSender):
    def send(self, to: str, subject: str, html: str) -> bool:
        logger.info(f"Email to {to}: {subject}")
        return True


class ExpoPushSender(PushSender):
    """Sends to registered devices through the Expo push service."""

    def __init__(
        self,
        tokens: List[str],
        url: str = EXPO_PUSH_URL,
        client: Optional[httpx.Client] = None,
    ):
        self.tokens = tokens
        self.url = url
        self.client = client or httpx.Client(timeout=HTTP_TIMEOUT)

    def send(self, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        if not self.tokens:
            logger.warning("No push tokens registered, notification not sent")
            return
        messages = [
            {
                "to": token,
                "sound": "default",
                "title": title,
                "body": body,
                "data": data or {},
                "priority": "high",
                "channelId": "default",
            }
            for token in self.tokens
        ]
        response = self.client.post(
            self.url,
            json=messages,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        logger.debug(f"Push sent to {len(self.tokens)} device(s)")


class ResendEmailSender(EmailSender):
    """Sends email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        url: str = RESEND_API_URL,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.url = url
        self.client = client or httpx.Client(timeout=HTTP_TIMEOUT)

    def send(self, to: str, subject: str, html: str) -> bool:
        try:
            response = self.client.post(
                self.url,
                json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Email to {to} rejected: {e.response.status_code} {e.response.text}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Email to {to} failed: {e}")
            return False

        logger.info(f"Email sent to {to}")
        return True
