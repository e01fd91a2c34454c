# Overview: Flask API routes for the shopkeeper dashboard; queue, status changes, EOD and sales history.

# backend/quickprint/routes/dashboard.py
"""
Shopkeeper Dashboard API Routes

- GET    /api/dashboard/queue                   - Paid orders, earliest first
- GET    /api/dashboard/stats                   - totals for the queue
- POST   /api/dashboard/jobs/<id>/status        - One status step (CAS)
- POST   /api/dashboard/jobs/<id>/pickup        - PRINTED -> READY
- DELETE /api/dashboard/orders/<id>             - Delete an order and its files
- GET    /api/dashboard/jobs/<id>/file-url      - Temporary download URL
- POST   /api/dashboard/eod                     - Run End of Day
- GET    /api/dashboard/summaries               - DailySummary history
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import dashboard_service, eod_service, job_status_service, order_service, summary_service
from ..services.job_status_service import InvalidTransitionError
from ..services.storage_service import CollaboratorError, get_file_store
from ..validation import NotFoundError, ValidationError
from quickprint.time_utils import local_today, parse_iso_date
from .orders import json_object, validation_response


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


def _date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)", field=name)


@dashboard_bp.get("/queue")
def queue_route():
    groups = dashboard_service.load_queue()
    return jsonify({"orders": [g.to_dict() for g in groups]}), 200


@dashboard_bp.get("/stats")
def stats_route():
    tz = summary_service.shop_timezone()
    groups = dashboard_service.load_queue()
    stats = dashboard_service.compute_dashboard_stats(groups, today=local_today(tz), tz=tz)
    return jsonify({"stats": stats.to_dict()}), 200


@dashboard_bp.post("/jobs/<job_id>/status")
def advance_status_route(job_id: str):
    """
    Request body:
    {
        "status": "processing",          // requested next status
        "expected_status": "queued"      // status shown on screen (optional)
    }

    Error responses:
        400: Unknown status value
        404: Job not found
        409: Not the next step, job unpaid, or the screen was stale
    """
    try:
        data = json_object()
        if not data.get("status"):
            return jsonify({"error": "status is required"}), 400

        job = job_status_service.advance_job_status(
            job_id,
            data["status"],
            expected_status=data.get("expected_status"),
        )
        return jsonify({"job": job.to_dict()}), 200

    except ValidationError as e:
        return validation_response(e)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvalidTransitionError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update job status")
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.post("/jobs/<job_id>/pickup")
def pickup_route(job_id: str):
    try:
        job = job_status_service.confirm_pickup(job_id)
        return jsonify({"job": job.to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvalidTransitionError as e:
        return jsonify({"error": str(e)}), 409


@dashboard_bp.delete("/orders/<group_id>")
def delete_order_route(group_id: str):
    try:
        result = order_service.delete_job_group(group_id)
        return jsonify(result), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CollaboratorError as e:
        current_app.logger.warning("Order delete failed: %s", e)
        return jsonify({"error": "Could not delete the order, please retry"}), 503
    except Exception:
        current_app.logger.exception("Failed to delete order")
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.get("/jobs/<job_id>/file-url")
def file_url_route(job_id: str):
    try:
        job = order_service.get_job(job_id)
        ttl = current_app.config["FILE_URL_TTL_SECONDS"]
        link = get_file_store().get_temporary_access_url(job.storage_path, ttl)
        return jsonify({"file_name": job.file_name, **link}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CollaboratorError as e:
        current_app.logger.warning("File URL failed for job %s: %s", job_id, e)
        return jsonify({"error": "File is not available, please retry"}), 503


@dashboard_bp.post("/eod")
def eod_route():
    """
    Run End of Day for "date" (YYYY-MM-DD, default today).

    Returns 200 when everything was archived, 207 when some file or
    order deletions failed (details in the body), 503 if the summary
    could not be written (nothing deleted).
    """
    try:
        data = json_object()
        try:
            as_of = parse_iso_date(data.get("date"))
        except ValueError:
            return jsonify({"error": "date must be YYYY-MM-DD"}), 400

        result = eod_service.run_end_of_day(as_of)
        return jsonify(result.to_dict()), 200 if result.ok else 207

    except ValidationError as e:
        return validation_response(e)
    except CollaboratorError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("EOD failed")
        return jsonify({"error": "Internal server error"}), 500


@dashboard_bp.get("/summaries")
def summaries_route():
    try:
        start = _date_arg("start")
        end = _date_arg("end")
    except ValidationError as e:
        return validation_response(e)

    summaries = summary_service.list_daily_summaries(start, end)
    return jsonify({
        "summaries": [s.to_dict() for s in summaries],
        "chart": summary_service.chart_points(summaries),
    }), 200
