"""Flask endpoints for alert status and on-demand checks."""

import os

from flask import Flask, current_app, jsonify, request

from alerting import AlertMonitor, build_monitor, load_config, summarize, tank_alert
from alerting.loader import to_dict

app = Flask(__name__)


def get_monitor() -> AlertMonitor:
    """Monitor configured from ALERTS_CONFIG, built once per app."""
    monitor = current_app.config.get("MONITOR")
    if monitor is None:
        config = load_config(os.environ.get("ALERTS_CONFIG", "farm.yaml"))
        monitor = build_monitor(config)
        current_app.config["MONITOR"] = monitor
    return monitor


@app.route("/alerts")
def alerts():
    """Current alerts with statuses brought up to date."""
    repo = get_monitor().repository
    current = repo.recalculate_alerts().alerts
    tank = repo.tank()

    payload = {
        "alerts": [to_dict(a) for a in current],
        "summary": summarize([a.status for a in current]),
        "tank": None,
    }
    if tank is not None:
        t = tank_alert(tank)
        payload["tank"] = {
            "status": t.status.value,
            "currentLevel": t.current_level,
            "capacity": t.capacity,
            "alertLevel": t.alert_level,
            "percentageFilled": round(t.percentage_filled, 1),
        }
    return jsonify(payload)


@app.route("/check", methods=["POST"])
def check():
    """Run a forced check; ?email=true also forces the email digest."""
    force_email = request.args.get("email", "").lower() == "true"
    report = get_monitor().force_check(force_email=force_email)
    if report is None:
        return jsonify({"error": "check did not run"}), 503

    return jsonify(
        {
            "emailWindowOpen": report.email_window_open,
            "pushesSent": report.pushes_sent,
            "pushFailures": report.push_failures,
            "notified": report.notified,
            "tankEmails": report.tank_emails,
            "maintenanceEmails": report.maintenance_emails,
            "emailFailures": len(report.email_failures),
        }
    )


if __name__ == "__main__":
    app.run(debug=True)
