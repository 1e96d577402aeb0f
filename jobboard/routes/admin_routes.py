from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from jobboard.db import SessionLocal
from jobboard.routes import json_body
from jobboard.serializers import job_to_dict
from jobboard.services.auth import admin_required, authenticate, create_admin, issue_token
from jobboard.services.ingestion import create_job

bp = Blueprint("admin", __name__, url_prefix="/admin")

@bp.post("/setup")
def setup():
    """
    Create the admin account
    ---
    tags: [Admin]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [username, password]
          properties:
            username: { type: string }
            password: { type: string }
    responses:
      200:
        description: Created
      400:
        description: Missing fields or admin already exists
    """
    data = json_body()
    with SessionLocal() as s:
        admin = create_admin(s, data.get("username"), data.get("password"))
        return jsonify({
            "success": True,
            "message": "Admin created successfully",
            "username": admin.username,
        })

@bp.post("/login")
def login():
    """
    Admin login
    ---
    tags: [Admin]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [username, password]
          properties:
            username: { type: string }
            password: { type: string }
    responses:
      200:
        description: Bearer token valid for 7 days
      401:
        description: Invalid credentials
    """
    data = json_body()
    with SessionLocal() as s:
        admin = authenticate(s, data.get("username"), data.get("password"))
        token = issue_token(admin, current_app.config["JWT_SECRET"])
        return jsonify({
            "success": True,
            "token": token,
            "admin": {"username": admin.username, "role": admin.role},
        })

@bp.post("/jobs")
@admin_required
def post_job():
    """
    Create Job
    ---
    tags: [Admin]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, company, location, description, applyLink]
          properties:
            title: { type: string }
            company: { type: string }
            location: { type: string }
            description: { type: string }
            requirements:
              type: array
              items: { type: string }
            salary: { type: string }
            applyLink: { type: string }
            category: { type: string, default: IT }
            jobType: { type: string, default: Full-time }
            experienceLevel: { type: string, default: Fresher }
            companyDescription: { type: string }
            slug: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      401:
        description: Not authorized
    """
    data = json_body()
    with SessionLocal() as s:
        job = create_job(s, data)
        return jsonify({"success": True, "job": job_to_dict(job)}), 201
