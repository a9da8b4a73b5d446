"""
Contractor resolution: expands an activity's embedded contractor id list.

Lookup maps come from contractor_service.build_lookup_maps() and are built
once per request, then reused for every activity in the response. Ids with no
match (contractor deleted after assignment) are skipped, never an error.
"""

from collections import defaultdict

from app.models.briefing import Activity


def resolve_activity_contractors(activity: Activity, lookup_maps) -> list[dict]:
    """Return descriptors for the activity's contractors that still exist."""
    resolved = []
    for contractor_id in activity.contractor_ids:
        info = lookup_maps.id_to_info.get(contractor_id)
        if info is None:
            continue
        resolved.append({
            **info,
            "name": lookup_maps.id_to_name.get(contractor_id, info.get("name")),
            "trade": lookup_maps.id_to_trade.get(contractor_id, info.get("trade")),
        })
    return resolved


def serialize_activity(activity: Activity, lookup_maps) -> dict:
    """Activity dict enriched with resolved contractor information.

    ``contractor_ids`` lists only the ids that resolved; the raw stored list
    is kept under ``stored_contractor_ids``.
    """
    details = resolve_activity_contractors(activity, lookup_maps)
    data = activity.to_dict()
    data["stored_contractor_ids"] = data.pop("contractor_ids")
    data["contractor_ids"] = [d["id"] for d in details]
    data["contractor_names"] = [d["name"] for d in details]
    data["contractor_details"] = [
        {"id": d["id"], "name": d["name"], "trade": d["trade"]} for d in details
    ]
    return data


def reverse_lookup(activities, lookup_maps) -> dict[int, list[int]]:
    """Map each resolved contractor id to the ids of activities assigning it."""
    by_contractor = defaultdict(list)
    for activity in activities:
        for contractor_id in activity.contractor_ids:
            if contractor_id in lookup_maps.id_to_info:
                by_contractor[contractor_id].append(activity.id)
    return dict(by_contractor)
