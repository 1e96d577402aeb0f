from __future__ import annotations

from flask import Blueprint, jsonify, request

from jobboard.db import SessionLocal
from jobboard.routes import json_body
from jobboard.serializers import event_to_dict
from jobboard.services.analytics import detailed_events, event_stats, track_event

bp = Blueprint("analytics", __name__, url_prefix="/analytics")

@bp.post("/track")
def track():
    """
    Track an analytics event
    ---
    tags: [Analytics]
    parameters:
      - name: Session-Id
        in: header
        type: string
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [eventType]
          properties:
            eventType:
              type: string
              enum: [page_view, search, application_click, bookmark, share]
            eventData: { type: string }
            url: { type: string }
    responses:
      200:
        description: Recorded
      400:
        description: Unknown eventType
    """
    data = json_body()
    with SessionLocal() as s:
        track_event(
            s,
            event_type=data.get("eventType"),
            event_data=data.get("eventData"),
            url=data.get("url"),
            user_agent=request.headers.get("User-Agent", ""),
            session_id=request.headers.get("Session-Id"),
        )
    return jsonify({"success": True})

@bp.get("/stats")
def stats():
    """
    Event totals and most searched terms
    ---
    tags: [Analytics]
    responses:
      200:
        description: Totals
    """
    with SessionLocal() as s:
        return jsonify({"success": True, **event_stats(s)})

@bp.get("/detailed")
def detailed():
    """
    Latest events, optionally within a date range
    ---
    tags: [Analytics]
    parameters:
      - name: startDate
        in: query
        type: string
      - name: endDate
        in: query
        type: string
    responses:
      200:
        description: Up to 100 events, newest first
      400:
        description: Unparseable date
    """
    with SessionLocal() as s:
        events = detailed_events(s, request.args.get("startDate"), request.args.get("endDate"))
        return jsonify({"success": True, "analytics": [event_to_dict(e) for e in events]})
