# Overview: Flask API routes for the customer order flow; parses input and returns JSON responses.

# backend/quickprint/routes/orders.py
"""
Customer Order API Routes

- POST   /api/orders                  - Start a new order (job group)
- GET    /api/orders/<id>             - Order with its jobs
- POST   /api/orders/<id>/jobs        - Upload a document (multipart "file")
- PUT    /api/jobs/<id>/recipe        - Configure print options, price the job
- POST   /api/pricing/quote           - Price preview for a recipe
- DELETE /api/jobs/<id>               - Remove a document
- POST   /api/orders/<id>/pay         - Confirm payment (UNPAID -> PAID)

Error responses:
    400: ValidationError ("errors" lists every problem)
    404: Order or job not found
    409: Order already paid
    503: Storage failure; nothing changed, retry
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import order_service
from ..services.pricing_service import PrintRecipe
from ..services.storage_service import CollaboratorError
from ..validation import ConflictError, NotFoundError, ValidationError, require_positive_int


orders_bp = Blueprint("orders", __name__, url_prefix="/api")


def validation_response(e: ValidationError):
    return jsonify({
        "error": e.message,
        "errors": [err.to_dict() for err in e.errors],
    }), 400


def json_object() -> dict:
    """JSON request body as a dict; a missing body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", field="body")
    return data


@orders_bp.post("/orders")
def create_order_route():
    try:
        data = json_object()
        group = order_service.create_job_group(data.get("user_label"))
        return jsonify({"order": group.to_dict()}), 201
    except ValidationError as e:
        return validation_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/orders/<group_id>")
def get_order_route(group_id: str):
    try:
        group = order_service.get_job_group(group_id)
        return jsonify({"order": group.to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@orders_bp.post("/orders/<group_id>/jobs")
def upload_job_route(group_id: str):
    """
    Upload one document into an open order.

    Form fields:
        file: the document (required)
        total_pages: page count (must match a PDF, required otherwise)
    """
    try:
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "file is required"}), 400

        job = order_service.add_job(
            group_id,
            file_name=upload.filename,
            data=upload.read(),
            total_pages=request.form.get("total_pages"),
        )
        return jsonify({"job": job.to_dict()}), 201

    except ValidationError as e:
        return validation_response(e)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except CollaboratorError as e:
        current_app.logger.warning("Upload failed: %s", e)
        return jsonify({"error": "Upload failed, please retry"}), 503
    except Exception:
        current_app.logger.exception("Failed to upload job")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.put("/jobs/<job_id>/recipe")
def configure_job_route(job_id: str):
    """
    Request body:
    {
        "pages": "1-3, 5",      // or "all"
        "color_mode": "bw",     // or "color"
        "sides": "single",      // or "double"
        "copies": 2             // 1-100
    }
    """
    try:
        recipe = PrintRecipe.from_dict(json_object())
        job = order_service.configure_job(job_id, recipe)
        return jsonify({"job": job.to_dict()}), 200

    except ValidationError as e:
        return validation_response(e)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to configure job")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/pricing/quote")
def quote_route():
    """Request body: a recipe plus "total_pages"."""
    try:
        data = json_object()
        total_pages = require_positive_int(data.get("total_pages"), field="total_pages")
        breakdown = order_service.quote_price(PrintRecipe.from_dict(data), total_pages)
        return jsonify({"quote": breakdown.to_dict()}), 200
    except ValidationError as e:
        return validation_response(e)


@orders_bp.delete("/jobs/<job_id>")
def delete_job_route(job_id: str):
    try:
        result = order_service.delete_job(job_id)
        return jsonify(result), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CollaboratorError as e:
        current_app.logger.warning("Job delete failed: %s", e)
        return jsonify({"error": "Could not delete the job, please retry"}), 503
    except Exception:
        current_app.logger.exception("Failed to delete job")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/orders/<group_id>/pay")
def confirm_payment_route(group_id: str):
    try:
        group = order_service.confirm_payment(group_id)
        return jsonify({
            "order": group.to_dict(),
            "message": f"Payment received! Order {group.order_code} is in the queue",
        }), 200

    except ValidationError as e:
        return validation_response(e)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to confirm payment")
        return jsonify({"error": "Internal server error"}), 500
