"""Generates human-readable explanations for allocation runs."""

from typing import Dict, List


def explain_run(
    student_count: int,
    hall_count: int,
    total_capacity: int,
    group_sizes: Dict[str, int],
    seed: str,
    derived_seed: int,
    seat_numbering: str,
    allocations_count: int,
    halls_used: int,
    initial_conflicts: int,
    remaining_conflicts: int,
    resolution_attempts: int,
    adjacency_strictness: str,
) -> List[str]:
    """Produce step-by-step explanation for a completed run."""
    steps = []

    steps.append(
        f"Step 1 - Capacity: {student_count} students, {total_capacity} seats "
        f"across {hall_count} active halls ({total_capacity - student_count} spare)"
    )

    groups_str = ", ".join(f"{k}: {v}" for k, v in group_sizes.items())
    steps.append(
        f"Step 2 - Grouping: {len(group_sizes)} class groups in roster order ({groups_str})"
    )

    steps.append(
        f"Step 3 - Shuffle: seed '{seed}' => CRC32 {derived_seed}, "
        f"each group shuffled in turn with one generator"
    )

    steps.append(
        f"Step 4 - Seat order: checkerboard seats first, then the remainder "
        f"({seat_numbering.replace('_', '-')} seat numbers)"
    )

    steps.append(
        f"Step 5 - Round-robin: {allocations_count} students placed in {halls_used} "
        f"halls, largest hall first, one student per class per round"
    )

    steps.append(
        f"Step 6 - Conflicts: {initial_conflicts} same-class neighbours detected "
        f"(left/right/front/back)"
    )

    if adjacency_strictness == "soft":
        steps.append("Step 7 - Resolution: skipped (soft adjacency), conflicts reported only")
    elif initial_conflicts == 0:
        steps.append("Step 7 - Resolution: not needed")
    else:
        steps.append(
            f"Step 7 - Resolution: {resolution_attempts} swap attempts => "
            f"{remaining_conflicts} conflicts remaining"
        )

    if remaining_conflicts:
        steps.append(
            f"Note: {remaining_conflicts} conflicts left unresolved; review them in the Hall Viewer"
        )

    return steps
