"""NotifiedAlert class for notification history records."""


class NotifiedAlert:
    """When an alert was last surfaced to the user."""

    def __init__(self, alert_id: str, last_notified_at: str):
        self.alert_id = alert_id
        self.last_notified_at = last_notified_at
