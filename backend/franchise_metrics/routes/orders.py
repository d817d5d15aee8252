# Overview: Flask API routes for order status changes.

from flask import Blueprint, current_app, jsonify, request

from ..services import order_lifecycle_service
from ..services.order_lifecycle_service import OrderTransitionError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("/<int:order_id>/status")
def update_order_status_route(order_id: int):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not status:
        return jsonify({"error": "status required"}), 400

    try:
        order = order_lifecycle_service.advance_order(order_id, status)
        return jsonify({"order": order.to_dict()}), 200

    except OrderTransitionError as e:
        return jsonify({"error": str(e)}), 409
    except ValueError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500
