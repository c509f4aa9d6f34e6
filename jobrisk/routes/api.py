# jobrisk/routes/api.py
from __future__ import annotations

from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from ..services.export import ExportError
from ..services.state import ANALYSIS_FAILED_MESSAGE, CANCELLED_MESSAGE, Mode
from ..services.uploads import decode_image
from ..services.validation import EMPTY_URL_MESSAGE, INVALID_URL_MESSAGE, ValidationError
from .common import build_exporter, current_controller

api_bp = Blueprint("api", __name__, url_prefix="/api")

VALIDATION_MESSAGES = (EMPTY_URL_MESSAGE, INVALID_URL_MESSAGE)

@api_bp.post("/assessment")
def assessment():
    try:
        ctl = current_controller()
        if ctl.state.busy:
            return jsonify(error="busy", message="An assessment is already running."), 409

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        url = payload.get("profileUrl", payload.get("profile_url"))
        for key, value in (("profileUrl", url), ("image", payload.get("image")),
                           ("imageMimeType", payload.get("imageMimeType"))):
            if value is not None and not isinstance(value, str):
                return jsonify(error="validation_error", message=f"'{key}' must be a string."), 400
        try:
            image = decode_image(
                payload.get("image"), payload.get("imageMimeType"),
                max_bytes=current_app.config["MAX_IMAGE_BYTES"],
            )
        except ValidationError as e:
            return jsonify(error="validation_error", message=e.message), 400

        state = ctl.submit(url, image)
        if state.last_error in VALIDATION_MESSAGES:
            return jsonify(error="validation_error", message=state.last_error), 400
        if state.mode is Mode.RESULTS and state.last_result is not None:
            return jsonify(state.last_result.to_dict()), 200
        if state.mode is Mode.ANALYZING:
            return jsonify(error="busy", message="An assessment is already running."), 409
        if state.last_error == CANCELLED_MESSAGE:
            return jsonify(error="cancelled", message=state.last_error), 409
        return jsonify(error="ai_error", message=state.last_error or ANALYSIS_FAILED_MESSAGE), 502

    except Exception:
        current_app.logger.exception("Unhandled error in /api/assessment")
        return jsonify(error="server_error", message="Something went wrong on our side. Please try again."), 500

@api_bp.get("/state")
def state():
    return jsonify(current_controller().state.to_dict())

@api_bp.post("/cancel")
def cancel():
    return jsonify(current_controller().cancel().to_dict())

@api_bp.post("/reset")
def reset():
    current_controller().reset()
    return ("", 204)

@api_bp.post("/export")
def export():
    ctl = current_controller()
    if ctl.state.mode is not Mode.RESULTS:
        return jsonify(error="no_result", message="Run an assessment before exporting."), 409
    try:
        report = ctl.export_requested(build_exporter())
    except ExportError as e:
        current_app.logger.warning("PDF export failed: %s", e)
        return jsonify(error="export_failed", message=str(e)), 500
    except Exception:
        current_app.logger.exception("Unhandled error in /api/export")
        return jsonify(error="export_failed", message="Could not generate the PDF report."), 500
    if report is None:
        return jsonify(error="busy", message="An export is already running."), 409
    return send_file(BytesIO(report.data),
                     mimetype=report.mimetype,
                     as_attachment=True,
                     download_name=report.filename)
