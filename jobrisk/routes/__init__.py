from __future__ import annotations
from flask import Flask

def register_routes(app: Flask) -> None:
    from .main import main_bp
    from .api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    # -------- Alias helper --------
    def alias_endpoint(source_ep: str, rule: str, alias_ep: str):
        if source_ep in app.view_functions and alias_ep not in app.view_functions:
            app.add_url_rule(rule, endpoint=alias_ep, view_func=app.view_functions[source_ep])

    # -------- Main routes --------
    alias_endpoint("main.index", "/", "index")
