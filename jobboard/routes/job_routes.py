from __future__ import annotations

from flask import Blueprint, jsonify, request
from sqlalchemy import func, select

from jobboard.db import SessionLocal
from jobboard.models.job import Job
from jobboard.serializers import job_to_dict
from jobboard.services.query import get_filter_options, get_job_by_slug, list_jobs

bp = Blueprint("jobs", __name__)

@bp.get("/health")
def health():
    """
    Health Check
    ---
    tags: [Meta]
    responses:
      200:
        description: API and DB health
        schema:
          type: object
          properties:
            success: { type: boolean }
            db_rows: { type: integer }
    """
    with SessionLocal() as s:
        total = s.scalar(select(func.count()).select_from(Job))
    return jsonify({"success": True, "db_rows": int(total or 0)})

@bp.get("/jobs")
def jobs_index():
    """
    List Jobs
    ---
    tags: [Jobs]
    parameters:
      - name: search
        in: query
        type: string
        description: Substring of title, company, description or location
      - name: category
        in: query
        type: string
        enum: [IT, Non-IT, Remote, Freshers]
      - name: jobType
        in: query
        type: string
        enum: [Full-time, Part-time, Contract, Remote, Internship]
      - name: experienceLevel
        in: query
        type: string
        enum: [Fresher, 0-1 years, 1-3 years, 3-5 years, 5+ years]
      - name: location
        in: query
        type: string
        description: Substring match, case-insensitive
      - name: datePosted
        in: query
        type: string
        description: today, 3days, 7days, 30days or a number of days
      - name: isFresherFriendly
        in: query
        type: string
        description: Only "true" applies the filter
      - name: sortBy
        in: query
        type: string
        default: postedDate
      - name: sortOrder
        in: query
        type: string
        enum: [asc, desc]
        default: desc
      - name: page
        in: query
        type: integer
        default: 1
      - name: limit
        in: query
        type: integer
        default: 10
    responses:
      200:
        description: Paginated jobs with filter options
        schema:
          type: object
          properties:
            success: { type: boolean }
            jobs:
              type: array
              items:
                $ref: '#/definitions/Job'
            pagination:
              type: object
              properties:
                total: { type: integer }
                page: { type: integer }
                limit: { type: integer }
                pages: { type: integer }
            filterOptions:
              $ref: '#/definitions/FilterOptions'
    definitions:
      Job:
        type: object
        properties:
          id: { type: integer }
          title: { type: string }
          slug: { type: string }
          company: { type: string }
          location: { type: string }
          description: { type: string }
          requirements:
            type: array
            items: { type: string }
          salary: { type: string }
          applyLink: { type: string }
          category: { type: string }
          jobType: { type: string }
          experienceLevel: { type: string }
          companyDescription: { type: string }
          isFresherFriendly: { type: boolean }
          postedDate: { type: string, format: date-time }
      FilterOptions:
        type: object
        properties:
          categories: { type: array, items: { type: string } }
          jobTypes: { type: array, items: { type: string } }
          experienceLevels: { type: array, items: { type: string } }
          locations: { type: array, items: { type: string } }
    """
    with SessionLocal() as s:
        result = list_jobs(s, request.args)
    return jsonify({"success": True, **result})

@bp.get("/jobs/filters/options")
def filter_options():
    """
    Filter Options
    ---
    tags: [Jobs]
    responses:
      200:
        description: Distinct values across all jobs
        schema:
          type: object
          properties:
            success: { type: boolean }
            filters:
              $ref: '#/definitions/FilterOptions'
    """
    with SessionLocal() as s:
        filters = get_filter_options(s)
    return jsonify({"success": True, "filters": filters})

@bp.get("/jobs/<slug>")
def get_job(slug: str):
    """
    Get Job by slug
    ---
    tags: [Jobs]
    parameters:
      - name: slug
        in: path
        type: string
        required: true
    responses:
      200:
        description: Job
      404:
        description: Not Found
    """
    with SessionLocal() as s:
        job = get_job_by_slug(s, slug)
        return jsonify({"success": True, "job": job_to_dict(job)})
