"""
Site Briefing Platform
Contractor registry model.

Models:
    - Contractor: a subcontractor record scoped to a project.

Activities reference contractors through an embedded id list
(see app.models.briefing.Activity.contractors); there is no join table and
deleting a contractor never touches activity rows.
"""

from datetime import datetime, timezone

from app.models import db
from app.models.base import ProjectModel


# ── Constants ────────────────────────────────────────────────────────────────

CONTRACTOR_STATUSES = ("Active", "Standby", "Delayed", "Complete", "Offsite")
DEFAULT_CONTRACTOR_STATUS = "Active"

# Listing order: known statuses in the order above, anything else last.
STATUS_SORT_ORDER = {status: rank for rank, status in enumerate(CONTRACTOR_STATUSES, start=1)}
UNKNOWN_STATUS_RANK = len(CONTRACTOR_STATUSES) + 1


class Contractor(ProjectModel):
    """
    A subcontractor working on a project.

    Name is unique per project, compared case-insensitively
    (see ``uq_contractors_project_lower_name`` below).
    """

    __tablename__ = "contractors"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    trade = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(50), nullable=False, default=DEFAULT_CONTRACTOR_STATUS)
    contact_name = db.Column(db.String(255), default="")
    phone = db.Column(db.String(50), default="")
    email = db.Column(db.String(255), nullable=True)
    created_by = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    def descriptor(self) -> dict:
        """Compact form embedded in resolved activity payloads."""
        return {
            "id": self.id,
            "name": self.name,
            "trade": self.trade,
            "status": self.status,
            "contact_name": self.contact_name or "",
            "phone": self.phone or "",
            "email": self.email or "",
        }

    def to_dict(self):
        return {
            **self.descriptor(),
            "project_id": self.project_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Contractor {self.id}: {self.name}>"


db.Index(
    "uq_contractors_project_lower_name",
    Contractor.project_id,
    db.func.lower(Contractor.name),
    unique=True,
)
