"""Explicit request scope passed into every service call."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Who is calling and for which project.

    Built per request by app.middleware.request_context; tests construct it
    directly.
    """

    project_id: int
    actor_id: int | None = None
    actor_name: str = "system"
