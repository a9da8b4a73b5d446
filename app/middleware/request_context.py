"""
Request Context Middleware — resolves project and actor for API requests.

Every service call receives an explicit RequestContext instead of reading
session state. This hook builds it once per request and stores it on
``g.request_ctx``.

Resolution order (first hit wins, per field):
  1. X-Project-Id / X-Actor-Id / X-Actor-Name headers
  2. Flask session keys current_project / user_id / user_name

API requests that resolve no positive project id are rejected with
400 ERR_VALIDATION_REQUIRED. Health checks are exempt.

Chain order:
  timing.py  →  request_context.py  →  route handler
"""

import logging

from flask import g, request, session

from app.core.context import RequestContext
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"

CONTEXT_SKIP_PREFIXES = (
    "/api/v1/health",
)


def _positive_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def resolve_request_context() -> RequestContext | None:
    """Build a RequestContext from headers, falling back to the session."""
    project_id = _positive_int(request.headers.get("X-Project-Id"))
    if project_id is None:
        project_id = _positive_int(session.get("current_project"))
    if project_id is None:
        return None

    actor_id = _positive_int(request.headers.get("X-Actor-Id"))
    if actor_id is None:
        actor_id = _positive_int(session.get("user_id"))
    actor_name = str(
        request.headers.get("X-Actor-Name")
        or session.get("user_name")
        or "system"
    ).strip() or "system"

    return RequestContext(project_id=project_id, actor_id=actor_id, actor_name=actor_name[:150])


def init_request_context(app):
    """Register the request context middleware as a before_request hook."""

    @app.before_request
    def _request_context():
        g.request_ctx = None

        if not request.path.startswith(API_PREFIX):
            return None
        for prefix in CONTEXT_SKIP_PREFIXES:
            if request.path.startswith(prefix):
                return None

        ctx = resolve_request_context()
        if ctx is None:
            logger.debug("Request without project context: %s %s", request.method, request.path)
            return api_error(
                E.VALIDATION_REQUIRED,
                "A project must be selected (X-Project-Id header)",
                details={"project_id": "required"},
            )

        g.request_ctx = ctx
        return None

    logger.info("Request context middleware installed")
