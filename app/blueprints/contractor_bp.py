"""
Contractor Blueprint.

Endpoints:
    GET    /api/v1/contractors        — registry in display order
    POST   /api/v1/contractors        — add (409 on duplicate name)
    GET    /api/v1/contractors/<id>   — single contractor
    PUT    /api/v1/contractors/<id>   — update
    DELETE /api/v1/contractors/<id>   — delete, returns prior record
"""

import logging

from flask import Blueprint

from app.blueprints import current_ctx, json_body
from app.services import contractor_service
from app.utils.errors import api_ok
from app.utils.helpers import commit_or_raise

logger = logging.getLogger(__name__)

contractor_bp = Blueprint("contractor_bp", __name__, url_prefix="/api/v1/contractors")


@contractor_bp.route("", methods=["GET"])
def list_contractors():
    ctx = current_ctx()
    contractors = contractor_service.list_contractors(ctx.project_id)
    return api_ok({
        "contractors": [c.to_dict() for c in contractors],
        "count": len(contractors),
        "active_count": contractor_service.count_active_contractors(ctx.project_id),
    })


@contractor_bp.route("", methods=["POST"])
def create_contractor():
    """Body (JSON): name, trade (required); status, contact_name, phone, email."""
    ctx = current_ctx()
    contractor = contractor_service.add_contractor(ctx, json_body())
    commit_or_raise("add_contractor")
    return api_ok(
        {"contractor": contractor.to_dict(), "message": "Contractor added successfully"},
        status=201,
    )


@contractor_bp.route("/<int:contractor_id>", methods=["GET"])
def get_contractor(contractor_id: int):
    ctx = current_ctx()
    contractor = contractor_service.get_contractor(ctx.project_id, contractor_id)
    return api_ok({"contractor": contractor.to_dict()})


@contractor_bp.route("/<int:contractor_id>", methods=["PUT"])
def update_contractor(contractor_id: int):
    ctx = current_ctx()
    contractor = contractor_service.update_contractor(ctx, contractor_id, json_body())
    commit_or_raise("update_contractor")
    return api_ok({"contractor": contractor.to_dict(), "message": "Contractor updated successfully"})


@contractor_bp.route("/<int:contractor_id>", methods=["DELETE"])
def delete_contractor(contractor_id: int):
    ctx = current_ctx()
    prior = contractor_service.delete_contractor(ctx, contractor_id)
    commit_or_raise("delete_contractor")
    return api_ok({"deleted": True, "prior": prior, "message": "Contractor deleted successfully"})
