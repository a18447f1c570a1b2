from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .conflicts import conflict_pairs, conflicting_members
from .models import VIEW_MODES
from .parse_roster import Roster, load_roster
from .render_rows import to_timeline_rows
from .render_timeline import render_timeline
from .store import ScheduleStore, ScheduleValidationError
from .timeline import utcnow, view_window


def _parse_anchor(value: str):
    import datetime as dt

    try:
        return dt.datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gantt Studio timeline snapshot and conflict report",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("seed", help="Path to team/tasks YAML")
    parser.add_argument("--out", default="output/timeline.svg", help="Output SVG path")
    parser.add_argument("--mode", choices=VIEW_MODES, default="week", help="Timeline granularity")
    parser.add_argument("--anchor", type=_parse_anchor, help="Anchor date (YYYY-MM-DD); defaults to today")
    parser.add_argument("--title", default="", help="Chart title; defaults to the visible range")
    parser.add_argument("--verbose", action="store_true", help="Log engine activity to stderr")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=True,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    return parser


def _report_conflicts(store: ScheduleStore) -> None:
    pairs = conflict_pairs(store.conflicts)
    if not pairs:
        print("No scheduling conflicts.")
        return
    print(f"{len(pairs)} scheduling conflict(s):")
    for first_id, second_id in pairs:
        first = store.get_task(first_id)
        second = store.get_task(second_id)
        if first is None or second is None:
            continue
        names = ", ".join(member.name for member in conflicting_members(first, second, store.members))
        print(f"  {first.title} <-> {second.title} ({names})")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    seed_path = Path(args.seed)

    try:
        roster: Roster = load_roster(str(seed_path))
        store = ScheduleStore(members=roster.members, tasks=roster.tasks)
    except (yaml.YAMLError, ScheduleValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: seed file not found: {seed_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading seed: {exc}", file=sys.stderr)
        return 1

    _report_conflicts(store)

    window = view_window(args.anchor or utcnow(), args.mode)
    rows = to_timeline_rows(store.tasks, store.members, window, store.conflicts)

    try:
        render_timeline(rows=rows, window=window, out_path=args.out, title=args.title)
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except Exception:
            pass

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
