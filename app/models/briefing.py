"""
Site Briefing Platform
Briefing domain models.

Models:
    - Briefing: one record per (project, calendar date); lazily created
    - Activity: a scheduled task inside a briefing, carrying labour and
      contractor assignments

Architecture chain: Project (external) → Briefing → Activity
"""

import json
from datetime import datetime, time, timezone

from app.models import db
from app.models.base import ProjectModel


# ── Constants ────────────────────────────────────────────────────────────────

PRIORITY_LEVELS = ("low", "medium", "high", "critical")
DEFAULT_PRIORITY = "medium"

# Higher rank sorts first; NULL / unknown priorities rank 0.
PRIORITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}

DEFAULT_ACTIVITY_TIME = time(8, 0)

DEFAULT_SAFETY_INFO = (
    "<ul><li>Follow all standard safety protocols</li>"
    "<li>Wear appropriate PPE at all times</li>"
    "<li>Report any safety concerns immediately</li></ul>"
)


# ── Contractor id list (embedded JSON) ───────────────────────────────────────

def normalise_contractor_ids(values) -> list[int]:
    """Coerce an iterable of ids to positive ints, de-duplicated, order kept.

    Non-numeric entries are dropped. Booleans are rejected even though they
    are ints in Python.
    """
    seen = set()
    result = []
    for value in values or ():
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value.isdigit():
                continue
            value = int(value)
        if not isinstance(value, int) or value <= 0:
            continue
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def parse_contractor_ids(raw) -> list[int]:
    """Deserialise the ``contractors`` column. Legacy free text parses to []."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    if not isinstance(value, list):
        return []
    return normalise_contractor_ids(value)


def dump_contractor_ids(ids) -> str | None:
    ids = normalise_contractor_ids(ids)
    return json.dumps(ids) if ids else None


# ═══════════════════════════════════════════════════════════════════════════
#  BRIEFING
# ═══════════════════════════════════════════════════════════════════════════

class Briefing(ProjectModel):
    """
    Daily briefing container for a project.

    At most one per (project_id, date), enforced by ``uq_briefings_project_date``.
    Free-text fields belong to the briefing-content subsystem and are stored
    as-is here.
    """

    __tablename__ = "briefings"
    __table_args__ = (
        db.UniqueConstraint("project_id", "date", name="uq_briefings_project_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="draft")
    overview = db.Column(db.Text, default="")
    safety_info = db.Column(db.Text, default="")
    notes = db.Column(db.Text, default="")
    created_by = db.Column(db.Integer, nullable=True, comment="Actor id from the request context")
    updated_by = db.Column(db.Integer, nullable=True)
    last_updated = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                             onupdate=lambda: datetime.now(timezone.utc))

    activities = db.relationship(
        "Activity", back_populates="briefing", cascade="all, delete-orphan", lazy="select",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "date": self.date.isoformat() if self.date else None,
            "date_uk": self.date.strftime("%d/%m/%Y") if self.date else None,
            "status": self.status,
            "overview": self.overview,
            "safety_info": self.safety_info,
            "notes": self.notes,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }

    def __repr__(self):
        return f"<Briefing {self.id}: project={self.project_id} {self.date}>"


# ═══════════════════════════════════════════════════════════════════════════
#  ACTIVITY
# ═══════════════════════════════════════════════════════════════════════════

class Activity(db.Model):
    """
    A scheduled task within a briefing.

    ``date`` mirrors the owning briefing's date. ``contractors`` holds a JSON
    array of contractor ids; read it through ``contractor_ids``.
    """

    __tablename__ = "activities"

    id = db.Column(db.Integer, primary_key=True)
    briefing_id = db.Column(
        db.Integer, db.ForeignKey("briefings.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    date = db.Column(db.Date, nullable=False, index=True)
    time = db.Column(db.Time, nullable=False, default=DEFAULT_ACTIVITY_TIME)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    area = db.Column(db.String(255), nullable=True)
    priority = db.Column(db.String(20), default=DEFAULT_PRIORITY)
    labor_count = db.Column(db.Integer, nullable=False, default=0)
    contractors = db.Column(db.Text, nullable=True, comment="JSON array of contractor ids")
    assigned_to = db.Column(db.String(100), default="")

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    briefing = db.relationship("Briefing", back_populates="activities")

    @property
    def contractor_ids(self) -> list[int]:
        return parse_contractor_ids(self.contractors)

    @contractor_ids.setter
    def contractor_ids(self, ids):
        self.contractors = dump_contractor_ids(ids)

    def to_dict(self):
        return {
            "id": self.id,
            "briefing_id": self.briefing_id,
            "date": self.date.isoformat() if self.date else None,
            "date_uk": self.date.strftime("%d/%m/%Y") if self.date else None,
            "time": self.time.strftime("%H:%M") if self.time else None,
            "title": self.title,
            "description": self.description,
            "area": self.area,
            "priority": self.priority,
            "labor_count": int(self.labor_count or 0),
            "contractor_ids": self.contractor_ids,
            "assigned_to": self.assigned_to,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Activity {self.id}: {self.title[:40]}>"
