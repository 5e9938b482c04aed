# api/utils/errors.py
"""
JSON error payloads for the scripture API.

Every error body looks like {"error": "snake_case_code", "detail": "..."}
plus any route-specific fields.
"""

from typing import Optional

from flask import jsonify


def error_response(code: str, status: int = 400, detail: Optional[str] = None, **extra):
    """
    Build an error body and status for a route to return.

    Extra keyword arguments are copied into the body (e.g. lang="tg").
    """
    payload = {"error": code}
    if detail:
        payload["detail"] = detail
    payload.update(extra)
    return jsonify(payload), status


# 400
def missing_field(field: str):
    """A required query parameter or body field is absent or empty."""
    return error_response(f"{field}_required", 400, f"Missing required field: {field}")


# 404
def not_found(resource: str = "resource", detail: str = None, **extra):
    """Book, chapter or section is not in the package."""
    return error_response("not_found", 404, detail or f"{resource} not found", **extra)


# 500
def server_error(code: str = "internal_error", detail: str = None):
    return error_response(code, 500, detail)


# 503
def package_unavailable(lang: str, detail: str = None):
    """The translation's package could not be indexed."""
    return error_response("package_unavailable", 503, detail, lang=lang)
