import datetime as dt
from pathlib import Path

from gantt_studio.__main__ import main
from gantt_studio.parse_roster import load_roster
from gantt_studio.render_rows import UNASSIGNED_COLOR, to_timeline_rows
from gantt_studio.render_timeline import render_timeline
from gantt_studio.store import ScheduleStore
from gantt_studio.timeline import view_window

SAMPLE = Path(__file__).resolve().parents[1] / "examples" / "sample_team.yaml"
ANCHOR = dt.datetime(2024, 6, 26)


def _sample_store():
    roster = load_roster(str(SAMPLE))
    return ScheduleStore(members=roster.members, tasks=roster.tasks)


def test_timeline_rows_cover_visible_tasks_only():
    store = _sample_store()
    window = view_window(ANCHOR, "week")  # 2024-06-23 .. 2024-06-29

    rows = to_timeline_rows(store.tasks, store.members, window, store.conflicts)

    assert [row.task_id for row in rows] == ["3", "4", "5"]
    assert [row.order for row in rows] == [0, 1, 2]
    assert [row.in_conflict for row in rows] == [True, False, True]
    assert rows[0].color == "#E57373"  # first assignee: Bob Smith
    assert rows[2].placement.continues_right


def test_unassigned_tasks_use_neutral_colour():
    store = _sample_store()
    store.update_task("3", assigned_to=[])
    window = view_window(ANCHOR, "week")

    rows = to_timeline_rows(store.tasks, store.members, window)

    assert rows[0].color == UNASSIGNED_COLOR
    assert not any(row.in_conflict for row in rows)


def test_renderer_produces_svg(tmp_path):
    store = _sample_store()
    window = view_window(ANCHOR, "week")
    rows = to_timeline_rows(store.tasks, store.members, window, store.conflicts)

    out_file = tmp_path / "timeline.svg"
    render_timeline(rows, window=window, out_path=str(out_file), title="Gantt Studio")

    assert out_file.exists()
    assert out_file.stat().st_size > 0


def test_renderer_handles_empty_window(tmp_path):
    window = view_window(dt.datetime(2030, 1, 1), "day")
    out_file = tmp_path / "nested" / "empty.svg"

    render_timeline([], window=window, out_path=str(out_file))

    assert out_file.exists()


def test_cli_reports_conflicts_and_writes_svg(tmp_path, capsys):
    out_file = tmp_path / "cli.svg"

    code = main([str(SAMPLE), "--out", str(out_file), "--mode", "month", "--anchor", "2024-06-12", "--no-view"])

    assert code == 0
    assert out_file.exists()
    out = capsys.readouterr().out
    assert "1 scheduling conflict(s)" in out
    assert "Frontend Development <-> Testing & QA (David Wilson)" in out


def test_cli_rejects_invalid_seed(tmp_path, capsys):
    seed = tmp_path / "bad.yaml"
    seed.write_text("members: []\ntasks:\n  - {id: 1, title: X, start: 2024-06-02, end: 2024-06-01}\n", encoding="utf-8")

    assert main([str(seed), "--out", str(tmp_path / "x.svg"), "--no-view"]) == 2
    assert "Error:" in capsys.readouterr().err


def test_cli_missing_seed_returns_one(tmp_path):
    assert main([str(tmp_path / "missing.yaml"), "--no-view"]) == 1
