from __future__ import annotations

from itertools import combinations
from typing import Iterable

from .models import Task, TeamMember

ConflictMap = dict[str, set[str]]


def detect_conflicts(tasks: Iterable[Task], members: Iterable[TeamMember]) -> ConflictMap:
    """
    Map each double-booked task id to the ids of the tasks it collides with.

    Two tasks collide when they share an assignee and their intervals overlap
    with open-interval semantics (a task ending exactly when another starts is
    fine). The map is symmetric and never lists a task against itself. Tasks
    without conflicts are absent.
    """

    task_list = list(tasks)
    conflicts: ConflictMap = {}

    for member in members:
        member_tasks = [task for task in task_list if member.id in task.assigned_to]
        for task_a, task_b in combinations(member_tasks, 2):
            if task_a.id == task_b.id:
                continue
            if task_a.overlaps(task_b):
                conflicts.setdefault(task_a.id, set()).add(task_b.id)
                conflicts.setdefault(task_b.id, set()).add(task_a.id)

    return conflicts


def conflicting_members(task_a: Task, task_b: Task, members: Iterable[TeamMember]) -> list[TeamMember]:
    """Members double-booked by the pair, in roster order; empty when the pair does not collide."""
    if not task_a.overlaps(task_b):
        return []
    shared = set(task_a.assigned_to) & set(task_b.assigned_to)
    return [member for member in members if member.id in shared]


def conflict_pairs(conflicts: ConflictMap) -> list[tuple[str, str]]:
    """Each colliding pair once, as sorted (id, id) tuples in sorted order."""
    pairs = {tuple(sorted((task_id, other))) for task_id, others in conflicts.items() for other in others}
    return sorted(pairs)
