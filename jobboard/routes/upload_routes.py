from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request

from jobboard.db import SessionLocal
from jobboard.errors import ValidationError
from jobboard.serializers import job_to_dict
from jobboard.services.auth import admin_required
from jobboard.services.ingestion import import_csv_upload, template_csv

bp = Blueprint("upload", __name__, url_prefix="/upload")

@bp.get("/template")
def template():
    """
    Download the bulk upload CSV template
    ---
    tags: [Upload]
    produces: [text/csv]
    responses:
      200:
        description: Header row plus one sample job
    """
    return Response(
        template_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=job_template.csv"},
    )

@bp.post("/bulk")
@admin_required
def bulk():
    """
    Bulk upload jobs from CSV
    ---
    tags: [Upload]
    security:
      - Bearer: []
    consumes: [multipart/form-data]
    parameters:
      - name: file
        in: formData
        type: file
        required: true
    responses:
      200:
        description: Per-row results; failed rows are listed in errors
        schema:
          type: object
          properties:
            success: { type: boolean }
            message: { type: string }
            processed: { type: integer }
            created: { type: integer }
            errors:
              type: array
              items: { type: string }
            jobs:
              type: array
              items:
                $ref: '#/definitions/Job'
      400:
        description: No file, or the file is not CSV
    """
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded")

    with SessionLocal() as s:
        result = import_csv_upload(s, upload, current_app.config["UPLOAD_DIR"], current_app.config["SITE_NAME"])
        return jsonify({
            "success": True,
            "message": f"Processed {result.processed} jobs",
            "processed": result.processed,
            "created": len(result.created),
            "errors": result.errors,
            "jobs": [job_to_dict(j) for j in result.created],
        })
