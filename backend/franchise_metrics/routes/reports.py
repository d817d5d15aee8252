# Overview: Flask API routes for report generation; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..errors import MetricsError
from ..services import report_service
from ..services.metrics_service import MetricsRequest


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.post("/generate")
def generate_report_route():
    """
    Build report content for the export layer.

    Body: {"type": "sales"|"financial"|"operational", "period": "...",
           "franchise_id": optional, "start"/"end": optional}
    Always computed under the strict policy.
    """
    data = request.get_json(silent=True) or {}
    report_type = data.get("type")
    period = data.get("period")
    start = data.get("start")
    end = data.get("end")

    if not report_type or not (period or (start and end)):
        return jsonify({"success": False, "error": "type and period are required"}), 400

    try:
        franchise_id = data.get("franchise_id")
        if franchise_id is not None:
            franchise_id = int(franchise_id)

        report = report_service.generate_report(
            report_type,
            MetricsRequest(
                period_token=period,
                franchise_id=franchise_id,
                start=start,
                end=end,
            ),
        )
        return jsonify({"success": True, "data": report}), 200

    except MetricsError as e:
        return jsonify({"success": False, "error": e.message, "details": e.details}), e.http_status
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to generate report")
        return jsonify({"success": False, "error": "Internal server error"}), 500
