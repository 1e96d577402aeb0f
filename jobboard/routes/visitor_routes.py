from __future__ import annotations

from flask import Blueprint, jsonify, request

from jobboard.db import SessionLocal
from jobboard.routes import json_body
from jobboard.serializers import visitor_to_dict
from jobboard.services.auth import admin_required
from jobboard.services.visitors import recent_visitors, track_visit, visitor_stats

bp = Blueprint("visitor", __name__, url_prefix="/visitor")

def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded.split(",")[0].strip():
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"

@bp.post("/track")
def track():
    """
    Track a page visit
    ---
    tags: [Visitors]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [page]
          properties:
            page: { type: string }
            referrer: { type: string }
    responses:
      200:
        description: Recorded (new visit or incremented count)
    """
    data = json_body()
    with SessionLocal() as s:
        track_visit(
            s,
            ip_address=client_ip(),
            user_agent=request.headers.get("User-Agent") or "unknown",
            page=data.get("page"),
            referrer=data.get("referrer"),
        )
    return jsonify({"success": True})

@bp.get("/stats")
@admin_required
def stats():
    """
    Visitor statistics
    ---
    tags: [Visitors]
    security:
      - Bearer: []
    parameters:
      - name: period
        in: query
        type: string
        enum: [24h, 7d, 30d, all]
        default: 7d
    responses:
      200:
        description: Aggregated counts
    """
    period = request.args.get("period", "7d")
    with SessionLocal() as s:
        return jsonify({"success": True, "stats": visitor_stats(s, period)})

@bp.get("/recent")
@admin_required
def recent():
    """
    Latest visits
    ---
    tags: [Visitors]
    security:
      - Bearer: []
    responses:
      200:
        description: The 50 most recent visit records
    """
    with SessionLocal() as s:
        return jsonify({"success": True, "visitors": [visitor_to_dict(v) for v in recent_visitors(s)]})
