# campaign_app/routes/health.py

"""
Health and metrics endpoints
"""

from flask import Response, current_app, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


def register_health_routes(app):
    """Register health and metrics routes"""

    @app.route("/integration/health", methods=["GET"])
    def integration_health():
        """List enabled contact loaders and their availability."""
        state = current_app.extensions.get("contact_loaders", {})
        return (
            jsonify(
                {
                    "status": "ok",
                    "loaders": list(state.get("loaders", ())),
                }
            ),
            200,
        )

    @app.route(app.config.get("METRICS_ENDPOINT", "/metrics"), methods=["GET"])
    def metrics():
        """Prometheus scrape endpoint, only served when monitoring is enabled."""
        if not current_app.config.get("MONITORING_ENABLED", False):
            return jsonify({"error": "Monitoring disabled"}), 404
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
