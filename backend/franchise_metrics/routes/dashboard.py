# Overview: Flask API routes for dashboard metrics; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import MetricsError
from ..services import metrics_service
from ..services.metrics_service import MetricsRequest


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/metrics")
def metrics_route():
    """
    Network (or single-franchise) metrics snapshot.

    Query: period=week|month|quarter|year (default month) or start/end,
    franchise_id, failure_policy=degrade|strict (default degrade: a
    dashboard prefers zeros over a blank screen).
    """
    start = request.args.get("start")
    end = request.args.get("end")
    period = request.args.get("period")
    if period is None and start is None and end is None:
        period = "month"

    franchise_id = request.args.get("franchise_id")
    if franchise_id is not None:
        try:
            franchise_id = int(franchise_id)
        except ValueError:
            return jsonify({"success": False, "error": "franchise_id must be an integer"}), 400

    try:
        snapshot = metrics_service.compute_metrics(
            MetricsRequest(
                period_token=period,
                franchise_id=franchise_id,
                failure_policy=request.args.get("failure_policy", "degrade"),
                start=start,
                end=end,
            )
        )
        return jsonify({"success": True, "data": snapshot.to_dict()}), 200

    except MetricsError as e:
        return jsonify({"success": False, "error": e.message, "details": e.details}), e.http_status
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to compute dashboard metrics")
        return jsonify({"success": False, "error": "Internal server error"}), 500
