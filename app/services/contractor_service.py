"""Contractor registry service.

Transaction policy: functions use flush(), never commit().
Caller (route handler) is responsible for committing.

Operations:
- list_contractors:        status-priority then name ordering
- build_lookup_maps:       id → name / trade / descriptor, built fresh per call
- add_contractor:          case-insensitive duplicate guard, status coercion
- get/update/delete_contractor
- count_active_contractors
"""
import logging
from typing import NamedTuple

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DuplicateNameError, NotFoundError, ValidationError
from app.models import db
from app.models.audit import write_audit
from app.models.contractor import STATUS_SORT_ORDER, UNKNOWN_STATUS_RANK, Contractor
from app.services.validation import clean_text, coerce_contractor_status, require_text

logger = logging.getLogger(__name__)


class LookupMaps(NamedTuple):
    """Contractor id → value maps for one project, keyed by int id."""

    id_to_name: dict
    id_to_trade: dict
    id_to_info: dict


# ── Queries ──────────────────────────────────────────────────────────────


def list_contractors(project_id: int) -> list[Contractor]:
    """Return the project's contractors in deterministic display order.

    Active, Standby, Delayed, Complete, Offsite, then any other status;
    name ascending (case-insensitive) within each status.
    """
    status_rank = case(STATUS_SORT_ORDER, value=Contractor.status, else_=UNKNOWN_STATUS_RANK)
    return (
        Contractor.query_for_project(project_id)
        .order_by(status_rank, func.lower(Contractor.name), Contractor.name, Contractor.id)
        .all()
    )


def build_lookup_maps(project_id: int) -> LookupMaps:
    """Build fresh lookup maps for resolving embedded contractor ids."""
    id_to_name, id_to_trade, id_to_info = {}, {}, {}
    for contractor in list_contractors(project_id):
        id_to_name[contractor.id] = contractor.name or "Unnamed Contractor"
        id_to_trade[contractor.id] = contractor.trade or "No Trade"
        id_to_info[contractor.id] = contractor.descriptor()
    logger.debug(
        "Built contractor lookup maps",
        extra={"project_id": project_id, "contractor_count": len(id_to_name)},
    )
    return LookupMaps(id_to_name, id_to_trade, id_to_info)


def get_contractor(project_id: int, contractor_id: int) -> Contractor:
    contractor = Contractor.query_for_project(project_id).filter_by(id=contractor_id).first()
    if contractor is None:
        raise NotFoundError("Contractor", contractor_id, project_id)
    return contractor


def existing_contractor_ids(project_id: int, candidate_ids) -> set[int]:
    """Subset of candidate_ids that are live contractors of the project."""
    candidate_ids = list(candidate_ids)
    if not candidate_ids:
        return set()
    rows = db.session.execute(
        select(Contractor.id).where(
            Contractor.project_id == project_id,
            Contractor.id.in_(candidate_ids),
        )
    ).scalars()
    return set(rows)


def count_active_contractors(project_id: int) -> int:
    """Distinct contractor names with status Active."""
    return db.session.execute(
        select(func.count(func.distinct(Contractor.name))).where(
            Contractor.project_id == project_id,
            Contractor.status == "Active",
        )
    ).scalar_one()


# ── Commands ─────────────────────────────────────────────────────────────


def _clean_email(value) -> str | None:
    email = clean_text(value, 255)
    if not email:
        return None
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"})


def _assert_name_free(project_id: int, name: str, exclude_id: int | None = None):
    q = Contractor.query_for_project(project_id).filter(
        func.lower(Contractor.name) == name.lower()
    )
    if exclude_id is not None:
        q = q.filter(Contractor.id != exclude_id)
    if q.first() is not None:
        logger.debug("Duplicate contractor name rejected", extra={"project_id": project_id})
        raise DuplicateNameError(name)


def _flush_unique(contractor: Contractor, name: str):
    """Flush inside a SAVEPOINT so a lost race on the unique index maps to DuplicateNameError."""
    try:
        with db.session.begin_nested():
            db.session.add(contractor)
    except IntegrityError:
        raise DuplicateNameError(name)


def add_contractor(ctx, data: dict) -> Contractor:
    """Create a contractor in the caller's project.

    Raises:
        ValidationError: name or trade empty, or email malformed.
        DuplicateNameError: name already used in the project (any case).
    """
    name = require_text(data, "name", "Contractor name", 255)
    trade = require_text(data, "trade", "Trade", 255)
    _assert_name_free(ctx.project_id, name)

    contractor = Contractor(
        project_id=ctx.project_id,
        name=name,
        trade=trade,
        status=coerce_contractor_status(data.get("status")),
        contact_name=clean_text(data.get("contact_name"), 255),
        phone=clean_text(data.get("phone"), 50),
        email=_clean_email(data.get("email")),
        created_by=ctx.actor_name,
    )
    _flush_unique(contractor, name)

    write_audit(
        entity_type="contractor", entity_id=contractor.id, action="contractor.create",
        ctx=ctx, diff={"name": name, "trade": trade, "status": contractor.status},
    )
    logger.info(
        "Contractor created",
        extra={"project_id": ctx.project_id, "contractor_id": contractor.id},
    )
    return contractor


def update_contractor(ctx, contractor_id: int, data: dict) -> Contractor:
    """Replace a contractor's details.

    An empty name or trade keeps the stored value; status falls back to Active.
    """
    contractor = get_contractor(ctx.project_id, contractor_id)
    before = contractor.descriptor()

    name = clean_text(data.get("name"), 255) or contractor.name
    if name.lower() != (contractor.name or "").lower():
        _assert_name_free(ctx.project_id, name, exclude_id=contractor.id)

    contractor.name = name
    contractor.trade = clean_text(data.get("trade"), 255) or contractor.trade
    contractor.status = coerce_contractor_status(data.get("status"))
    contractor.contact_name = clean_text(data.get("contact_name"), 255)
    contractor.phone = clean_text(data.get("phone"), 50)
    contractor.email = _clean_email(data.get("email"))
    _flush_unique(contractor, name)

    write_audit(
        entity_type="contractor", entity_id=contractor.id, action="contractor.update",
        ctx=ctx, diff={"before": before, "after": contractor.descriptor()},
    )
    return contractor


def delete_contractor(ctx, contractor_id: int) -> dict:
    """Delete a contractor. Activities keep the now-dangling id.

    Returns:
        The pre-deletion record.
    """
    contractor = get_contractor(ctx.project_id, contractor_id)
    prior = contractor.to_dict()
    db.session.delete(contractor)
    db.session.flush()
    write_audit(
        entity_type="contractor", entity_id=contractor_id, action="contractor.delete",
        ctx=ctx, diff={"prior": prior},
    )
    return prior
