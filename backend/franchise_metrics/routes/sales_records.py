# Overview: Flask API routes for daily sales declarations.

from datetime import date

from flask import Blueprint, current_app, jsonify, request

from ..services import sales_record_service
from ..services.sales_record_service import SalesRecordError


sales_records_bp = Blueprint("sales_records", __name__, url_prefix="/api/sales-records")


@sales_records_bp.post("/")
def create_sales_record_route():
    data = request.get_json(silent=True) or {}
    required = ("franchise_id", "report_date", "gross_sales_cents", "transaction_count")
    missing = [key for key in required if data.get(key) is None]
    if missing:
        return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400

    try:
        record = sales_record_service.record_daily_sales(
            int(data["franchise_id"]),
            date.fromisoformat(str(data["report_date"])),
            int(data["gross_sales_cents"]),
            int(data["transaction_count"]),
            payment_status=data.get("payment_status", "PENDING"),
        )
        return jsonify({"sales_record": record.to_dict()}), 201

    except SalesRecordError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record daily sales")
        return jsonify({"error": "Internal server error"}), 500
