# jobrisk/routes/main.py
from __future__ import annotations

from io import BytesIO

from flask import (
    Blueprint, current_app, flash, redirect, render_template, request, send_file, url_for
)

from ..services.export import ExportError
from ..services.state import Mode
from ..services.uploads import read_upload
from ..services.validation import ValidationError
from .common import build_exporter, current_controller, results_context

main_bp = Blueprint("main", __name__)

EXPORT_FAILED_MESSAGE = "Could not generate the PDF report. Please try again."

# ──────────────────────────────────────────────────────────────
# Pages
# ──────────────────────────────────────────────────────────────

@main_bp.get("/")
def index():
    ctl = current_controller()
    state = ctl.state
    ctx = {"state": state, "Mode": Mode}
    if state.mode is Mode.RESULTS and state.last_result is not None:
        ctx.update(results_context(state.last_result))
        ctx["scroll_target"] = ctl.consume_scroll_target()
    return render_template("index.html", **ctx)

# ──────────────────────────────────────────────────────────────
# Actions
# ──────────────────────────────────────────────────────────────

@main_bp.post("/assess")
def assess():
    ctl = current_controller()
    try:
        image = read_upload(request.files.get("screenshot"), current_app.config["MAX_IMAGE_BYTES"])
    except ValidationError as e:
        flash(e.message, "error")
        return redirect(url_for("main.index"))

    state = ctl.submit(request.form.get("profile_url"), image)
    if state.mode is Mode.RESULTS:
        return redirect(url_for("main.index", _anchor="result-section"))
    return redirect(url_for("main.index"))

@main_bp.post("/screenshot/clear")
def clear_screenshot():
    current_controller().clear_image()
    return redirect(url_for("main.index"))

@main_bp.post("/cancel")
def cancel():
    current_controller().cancel()
    return redirect(url_for("main.index"))

@main_bp.post("/reset")
def reset():
    current_controller().reset()
    return redirect(url_for("main.index"))

@main_bp.get("/export")
def export():
    ctl = current_controller()
    if ctl.state.mode is not Mode.RESULTS:
        return redirect(url_for("main.index"))
    try:
        report = ctl.export_requested(build_exporter())
    except ExportError as e:
        current_app.logger.warning("PDF export failed: %s", e)
        flash(str(e) or EXPORT_FAILED_MESSAGE, "alert")
        return redirect(url_for("main.index"))
    except Exception:
        current_app.logger.exception("Unhandled error in /export")
        flash(EXPORT_FAILED_MESSAGE, "alert")
        return redirect(url_for("main.index"))

    if report is None:
        # another export for this session is still running
        return redirect(url_for("main.index"))
    return send_file(BytesIO(report.data),
                     mimetype=report.mimetype,
                     as_attachment=True,
                     download_name=report.filename)
