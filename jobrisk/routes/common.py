# jobrisk/routes/common.py
from __future__ import annotations

from flask import current_app, render_template, session

from ..services.charts import risk_gauge, skill_bars
from ..services.export import ReportExporter
from ..services.models import AssessmentResult
from ..services.state import AssessmentController, ViewStateRegistry

SESSION_KEY = "view_state_id"

def _registry() -> ViewStateRegistry:
    return current_app.config["VIEW_STATES"]

def current_controller() -> AssessmentController:
    """Controller for this browser; a fresh session id means a fresh view state."""
    sid = session.get(SESSION_KEY)
    if not sid:
        sid = ViewStateRegistry.new_session_id()
        session[SESSION_KEY] = sid
    return _registry().get(sid)

def results_context(result: AssessmentResult) -> dict:
    return {
        "result": result,
        "gauge": risk_gauge(result.risk_score, result.overall_risk),
        "bars": skill_bars(result.skills_analysis),
    }

def render_report_html(result: AssessmentResult) -> str:
    return render_template("report.html", for_pdf=True, **results_context(result))

def build_exporter() -> ReportExporter:
    return ReportExporter(
        render_report_html,
        base_url=current_app.root_path,
        prefix=current_app.config["REPORT_PREFIX"],
    )
