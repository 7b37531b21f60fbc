"""Run-level statistics, summaries and per-hall utilization."""

from collections import OrderedDict
from typing import Dict, List, Optional

from models.hall import Hall
from models.allocation import Allocation
from models.conflict import SeatConflict
from config.defaults import CONFLICT_TYPES, UNASSIGNED_GROUP


def aggregate_metadata(
    allocations: List[Allocation],
    conflicts: List[SeatConflict],
    seat_numbering: str,
) -> dict:
    """Descriptive statistics stored on the run once it completes."""
    halls_used = set()
    class_counts: Dict[str, int] = OrderedDict()

    for alloc in allocations:
        halls_used.add(alloc.hall_id)
        key = alloc.class_group or UNASSIGNED_GROUP
        class_counts[key] = class_counts.get(key, 0) + 1

    return {
        "total_students": len(allocations),
        "total_conflicts": sum(1 for c in conflicts if not c.resolved),
        "halls_used": len(halls_used),
        "class_distribution": dict(class_counts),
        "seat_numbering_used": seat_numbering,
    }


def build_summary(
    run_id: str,
    allocations: List[Allocation],
    conflicts: List[SeatConflict],
    metadata: Optional[dict] = None,
) -> dict:
    unresolved = sum(1 for c in conflicts if not c.resolved)
    halls_used = (metadata or {}).get("halls_used")
    if halls_used is None:
        halls_used = len({a.hall_id for a in allocations})

    return {
        "allocation_run_id": run_id,
        "allocations_count": len(allocations),
        "conflicts_count": len(conflicts),
        "halls_used": halls_used,
        "has_unresolved_conflicts": unresolved > 0,
    }


def conflict_report(conflicts: List[SeatConflict]) -> dict:
    by_type = {t: 0 for t in CONFLICT_TYPES}
    for c in conflicts:
        by_type[c.conflict_type] = by_type.get(c.conflict_type, 0) + 1

    return {
        "total": len(conflicts),
        "unresolved": sum(1 for c in conflicts if not c.resolved),
        "by_type": by_type,
    }


def get_hall_utilization(halls: List[Hall], allocations: List[Allocation]) -> List[dict]:
    """Compute seat usage per hall."""
    usage = {}
    for a in allocations:
        if a.hall_id not in usage:
            usage[a.hall_id] = {"classes": {}, "total_used": 0}
        key = a.class_group or UNASSIGNED_GROUP
        usage[a.hall_id]["classes"][key] = usage[a.hall_id]["classes"].get(key, 0) + 1
        usage[a.hall_id]["total_used"] += 1

    results = []
    for h in halls:
        used = usage.get(h.hall_id, {}).get("total_used", 0)
        classes = usage.get(h.hall_id, {}).get("classes", {})
        results.append({
            "hall_id": h.hall_id,
            "hall_name": h.name,
            "rows": h.rows,
            "columns": h.columns,
            "capacity": h.capacity,
            "used_seats": used,
            "available_seats": h.capacity - used,
            "utilization_pct": used / h.capacity if h.capacity > 0 else 0,
            "class_count": len(classes),
            "classes": classes,
            "is_active": h.is_active,
        })
    return results
