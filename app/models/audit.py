"""
Site Briefing Platform
Audit domain model.

Models:
    - AuditLog: immutable, append-only audit trail for briefing, activity
      and contractor events.
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.models import db

logger = logging.getLogger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

AUDIT_ENTITY_TYPES = {"briefing", "activity", "contractor"}

AUDIT_ACTIONS = {
    "briefing.create",
    "activity.create",
    "activity.update",
    "activity.delete",
    "activity.copy_day",
    "contractor.create",
    "contractor.update",
    "contractor.delete",
}


class AuditLog(db.Model):
    """
    Immutable audit trail for every write performed by the core.

    One row per action. ``diff_json`` carries the prior snapshot for deletes
    and a summary payload for bulk operations such as day copies.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("idx_audit_entity", "entity_type", "entity_id"),
        db.Index("idx_audit_project", "project_id"),
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_ts", "timestamp"),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, nullable=True)

    # Polymorphic entity reference
    entity_type = db.Column(
        db.String(30), nullable=False,
        comment="briefing | activity | contractor",
    )
    entity_id = db.Column(
        db.String(36), nullable=False,
        comment="PK of the referenced entity as string",
    )

    # What happened
    action = db.Column(
        db.String(60), nullable=False,
        comment="activity.create | activity.copy_day | …",
    )
    actor = db.Column(db.String(150), nullable=False, default="system")
    actor_id = db.Column(db.Integer, nullable=True)

    diff_json = db.Column(db.Text, default="{}")

    timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def diff(self) -> dict:
        """Deserialise *diff_json* to a Python dict."""
        try:
            return json.loads(self.diff_json or "{}")
        except (json.JSONDecodeError, TypeError):
            return {}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "actor": self.actor,
            "actor_id": self.actor_id,
            "diff": self.diff,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<AuditLog {self.id}: {self.action} on {self.entity_type}/{self.entity_id}>"


# ── Convenience writer ───────────────────────────────────────────────────────

def write_audit(
    *,
    entity_type: str,
    entity_id,
    action: str,
    ctx=None,
    diff: dict | None = None,
) -> AuditLog | None:
    """
    Append a single audit row inside a SAVEPOINT.

    The audit sink is fire-and-forget: a failed insert rolls back only its
    own savepoint and is logged; the caller's transaction carries on.

    Returns the (flushed) AuditLog instance, or None if the write failed.
    """
    log = AuditLog(
        project_id=getattr(ctx, "project_id", None),
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        actor=getattr(ctx, "actor_name", None) or "system",
        actor_id=getattr(ctx, "actor_id", None),
        diff_json=json.dumps(diff or {}, default=str),
    )
    try:
        with db.session.begin_nested():
            db.session.add(log)
    except SQLAlchemyError:
        logger.warning("Audit write failed: %s %s/%s", action, entity_type, entity_id, exc_info=True)
        return None
    return log
