"""
ProjectModel — Abstract base class for project-scoped models.

Projects are owned by an external system; this core only stores the opaque
project_id. Models that need project isolation inherit from ProjectModel
instead of db.Model directly. This adds:
  - project_id column with index
  - query_for_project(project_id) classmethod
"""

from app.models import db


class ProjectModel(db.Model):
    """Abstract base for project-scoped tables."""
    __abstract__ = True

    project_id = db.Column(
        db.Integer,
        nullable=False,
        index=True,
        comment="Opaque project id supplied by the request context",
    )

    @classmethod
    def query_for_project(cls, project_id):
        """Return a query filtered by project_id."""
        return cls.query.filter_by(project_id=project_id)
