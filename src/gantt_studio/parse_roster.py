from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any

import yaml

from .models import PRIORITIES, Task, TeamMember
from .store import ScheduleValidationError

MEMBER_KEYS = {"id", "name", "avatar", "color", "email"}
TASK_KEYS = {
    "id",
    "title",
    "description",
    "start",
    "end",
    "assigned_to",
    "completed",
    "progress",
    "priority",
    "dependencies",
}


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like tasks[0].priority."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


@dataclass
class Roster:
    """Bootstrap data for a ScheduleStore: the team and its initial tasks."""

    members: list[TeamMember] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)


def load_roster(path: str) -> Roster:
    """Load members and tasks from a YAML seed file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_roster(raw)


def parse_roster(data: Any) -> Roster:
    path = _Path()
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"members", "tasks"}, path)

    members_raw = _require_list(data, "members", path)
    member_ids: set[str] = set()
    members: list[TeamMember] = []
    for idx, member_raw in enumerate(members_raw):
        member = _parse_member(member_raw, path.child(f"members[{idx}]"))
        if member.id in member_ids:
            raise ScheduleValidationError(f"{path.child(f'members[{idx}]')}: duplicate member id '{member.id}'")
        member_ids.add(member.id)
        members.append(member)

    tasks_raw = data.get("tasks") or []
    if not isinstance(tasks_raw, list):
        raise ScheduleValidationError(f"{path.child('tasks')}: expected list")
    task_ids: set[str] = set()
    tasks: list[Task] = []
    for idx, task_raw in enumerate(tasks_raw):
        task_path = path.child(f"tasks[{idx}]")
        task = _parse_task(task_raw, task_path, member_ids)
        if task.id in task_ids:
            raise ScheduleValidationError(f"{task_path}: duplicate task id '{task.id}'")
        task_ids.add(task.id)
        tasks.append(task)

    return Roster(members=members, tasks=tasks)


def _parse_member(data: Any, path: _Path) -> TeamMember:
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping for member")
    _assert_allowed_keys(data, MEMBER_KEYS, path)
    name = _require_str(data, "name", path)
    avatar = data.get("avatar") or "".join(part[0] for part in name.split()).upper()
    return TeamMember(
        id=_require_id(data, path),
        name=name,
        avatar=str(avatar),
        color=str(data.get("color", "#90A4AE")),
        email=str(data.get("email", "")),
    )


def _parse_task(data: Any, path: _Path, member_ids: set[str]) -> Task:
    if not isinstance(data, dict):
        raise ScheduleValidationError(f"{path}: expected mapping for task")
    _assert_allowed_keys(data, TASK_KEYS, path)

    task_id = _require_id(data, path)
    title = _require_str(data, "title", path)
    start = _parse_datetime(_require_value(data, "start", path), path.child("start"))
    end = _parse_datetime(_require_value(data, "end", path), path.child("end"))
    if not start < end:
        raise ScheduleValidationError(f"{path}: start {start} must be before end {end}")

    assigned_to = _parse_id_list(data.get("assigned_to"), path.child("assigned_to"))
    for idx, member_id in enumerate(assigned_to):
        if member_id not in member_ids:
            raise ScheduleValidationError(f"{path.child(f'assigned_to[{idx}]')}: unknown member '{member_id}'")
    if len(set(assigned_to)) != len(assigned_to):
        raise ScheduleValidationError(f"{path.child('assigned_to')}: duplicate member ids")

    completed = data.get("completed", False)
    if not isinstance(completed, bool):
        raise ScheduleValidationError(f"{path.child('completed')}: expected boolean")

    progress = data.get("progress", 100 if completed else 0)
    if not isinstance(progress, int) or isinstance(progress, bool) or not 0 <= progress <= 100:
        raise ScheduleValidationError(f"{path.child('progress')}: expected integer 0-100")

    priority = data.get("priority", "medium")
    if priority not in PRIORITIES:
        raise ScheduleValidationError(f"{path.child('priority')}: expected one of {list(PRIORITIES)}")

    description = data.get("description") or ""
    if not isinstance(description, str):
        raise ScheduleValidationError(f"{path.child('description')}: expected string")

    return Task(
        id=task_id,
        title=title,
        description=description,
        start_date=start,
        end_date=end,
        assigned_to=assigned_to,
        completed=completed,
        progress=progress,
        priority=priority,
        dependencies=_parse_id_list(data.get("dependencies"), path.child("dependencies")),
    )


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(set(data.keys()) - allowed)
    if extras:
        raise ScheduleValidationError(f"{path}: unexpected fields {extras}")


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise ScheduleValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    if not isinstance(value, str) or not value.strip():
        raise ScheduleValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _require_list(data: dict[str, Any], key: str, path: _Path) -> list[Any]:
    value = _require_value(data, key, path)
    if not isinstance(value, list):
        raise ScheduleValidationError(f"{path.child(key)}: expected list")
    return value


def _require_id(data: dict[str, Any], path: _Path) -> str:
    # Unquoted numeric ids are common in hand-written YAML.
    value = _require_value(data, "id", path)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ScheduleValidationError(f"{path.child('id')}: expected non-empty string id")
    return value


def _parse_id_list(value: Any, path: _Path) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ScheduleValidationError(f"{path}: expected list of ids")
    ids: list[str] = []
    for idx, item in enumerate(value):
        if isinstance(item, int) and not isinstance(item, bool):
            item = str(item)
        if not isinstance(item, str):
            raise ScheduleValidationError(f"{path}[{idx}]: expected string id")
        ids.append(item)
    return ids


def _parse_datetime(value: Any, path: _Path) -> _dt.datetime:
    if isinstance(value, str):
        try:
            value = _dt.datetime.fromisoformat(value)
        except ValueError as exc:
            raise ScheduleValidationError(f"{path}: expected ISO timestamp") from exc
    if isinstance(value, _dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, _dt.date):
        return _dt.datetime(value.year, value.month, value.day)
    raise ScheduleValidationError(f"{path}: expected ISO timestamp")
