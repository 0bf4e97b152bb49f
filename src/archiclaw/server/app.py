"""archiclaw.server.app - Flask app factory and read-only REST API routes.

A THIN wrapper: every route delegates to ``archiclaw.core.query`` over one
snapshot taken at startup. Nothing is written back to the landscape.

State:
    _state = {"landscape": landscape, "build_time": time.time()}
"""

from __future__ import annotations

import time
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from archiclaw.core import query
from archiclaw.core.models import to_plain
from archiclaw.core.snapshot import Landscape


def create_app(landscape: Landscape) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        landscape: Snapshot to serve.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)

    _state: dict[str, Any] = {
        "landscape": landscape,
        "build_time": time.time(),
    }

    def _not_found(kind: str, item_id: str):
        return jsonify({"error": f"{kind} '{item_id}' not found"}), 404

    # ─────────────────────────────────────────────────────────────────
    # Overview
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/status")
    def api_status():
        """GET /api/status - Record counts, validity and snapshot age."""
        result = query.summary(_state["landscape"])
        result["build_time"] = _state["build_time"]
        return jsonify(result)

    @app.route("/api/validation")
    def api_validation():
        """GET /api/validation - Full validation report of the snapshot."""
        return jsonify(_state["landscape"].validation.to_dict())

    # ─────────────────────────────────────────────────────────────────
    # Applications and domains
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/applications")
    def api_applications():
        """GET /api/applications - All application passports."""
        return jsonify([to_plain(a) for a in _state["landscape"].applications.values()])

    @app.route("/api/applications/<app_id>")
    def api_application(app_id: str):
        app_record = query.get_application(_state["landscape"], app_id)
        if app_record is None:
            return _not_found("Application", app_id)
        return jsonify(to_plain(app_record))

    @app.route("/api/domains")
    def api_domains():
        return jsonify([to_plain(d) for d in _state["landscape"].domains])

    @app.route("/api/domains/<domain_id>")
    def api_domain(domain_id: str):
        domain = query.get_domain(_state["landscape"], domain_id)
        if domain is None:
            return _not_found("Domain", domain_id)
        return jsonify(to_plain(domain))

    @app.route("/api/domains/<domain_id>/applications")
    def api_domain_applications(domain_id: str):
        apps = query.get_applications_by_domain(_state["landscape"], domain_id)
        return jsonify([to_plain(a) for a in apps])

    @app.route("/api/domains/<domain_id>/capabilities")
    def api_domain_capabilities(domain_id: str):
        caps = query.get_capabilities_by_domain(_state["landscape"], domain_id)
        return jsonify([to_plain(c) for c in caps])

    @app.route("/api/domains/<domain_id>/data-entities")
    def api_domain_data_entities(domain_id: str):
        entities = query.get_data_entities_by_domain(_state["landscape"], domain_id)
        return jsonify([to_plain(e) for e in entities])

    # ─────────────────────────────────────────────────────────────────
    # Integrations, data entities, search
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/integrations")
    def api_integrations():
        """GET /api/integrations?app=X[&other=Y] - Integrations, optionally filtered."""
        landscape_ = _state["landscape"]
        app_id = request.args.get("app")
        other_id = request.args.get("other")
        if app_id and other_id:
            found = query.get_integrations_between(landscape_, app_id, other_id)
        elif app_id:
            found = query.get_integrations_for_app(landscape_, app_id)
        else:
            found = landscape_.integrations
        return jsonify([to_plain(i) for i in found])

    @app.route("/api/data-entities")
    def api_data_entities():
        """GET /api/data-entities?app=X - Data entities, optionally by application."""
        landscape_ = _state["landscape"]
        app_id = request.args.get("app")
        if app_id:
            found = query.get_data_entities_for_app(landscape_, app_id)
        else:
            found = landscape_.data_entities
        return jsonify([to_plain(e) for e in found])

    @app.route("/api/search")
    def api_search():
        """GET /api/search?q=text - Full-text search across entity kinds."""
        q = request.args.get("q", "").strip()
        if not q:
            return jsonify({"error": "Missing query parameter 'q'"}), 400
        return jsonify(query.search(_state["landscape"], q).to_dict())

    return app
