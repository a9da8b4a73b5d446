"""Standardised API responses.

Every endpoint answers with a discriminated result:

    success:  {"ok": true, ...payload}
    failure:  {"ok": false, "code": "ERR_…", "error": "human readable"}

Usage
-----
    from app.utils.errors import api_error, api_ok, E

    return api_ok({"activity": activity.to_dict()}, status=201)
    return api_error(E.NOT_FOUND, "Activity not found")
    return api_error(E.VALIDATION_REQUIRED, "title is required", details={"title": "required"})
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Conflict / duplicate – HTTP 409
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"

    # Day copy refusals
    NO_SOURCE_DATA = "ERR_NO_SOURCE_DATA"
    TARGET_NOT_EMPTY = "ERR_TARGET_NOT_EMPTY"
    NOTHING_TO_COPY = "ERR_NOTHING_TO_COPY"

    # Server
    STORAGE = "ERR_STORAGE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.NOT_FOUND: 404,
    E.CONFLICT_DUPLICATE: 409,
    E.NO_SOURCE_DATA: 404,
    E.TARGET_NOT_EMPTY: 409,
    E.NOTHING_TO_COPY: 409,
    E.STORAGE: 503,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (field errors, copy context, etc.).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "ok": False,
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def api_ok(payload: dict | None = None, *, status: int = 200):
    """Return a standard JSON success response."""
    body = {"ok": True}
    body.update(payload or {})
    return jsonify(body), status
