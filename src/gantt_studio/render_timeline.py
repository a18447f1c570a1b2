from __future__ import annotations

from datetime import datetime
from importlib import metadata
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt

from .models import TimelineRow, ViewWindow

FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 10 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
TICK_FONT = 9 * FONT_SCALE
ROW_HEIGHT = 0.6
CONFLICT_EDGE = "#E57373"
BAR_EDGE = "#37474F"
MARKER_COLOR = "#37474F"
PROGRESS_ALPHA = 0.35
TITLE_Y = 0.985

TICK_FORMATS = {
    "day": "%H:%M",
    "week": "%a %d",
    "month": "%d",
}


def render_timeline(
    rows: list[TimelineRow],
    window: ViewWindow,
    out_path: str,
    title: str = "",
) -> None:
    """
    Render a static SVG snapshot of the visible window to `out_path`.

    - Expects rows produced for the same window (placements in percent).
    - One vertical grid line per bucket; the x axis spans 0-100% of the window.
    - Double-booked bars get a red outline; clipped edges get a chevron marker.
    """

    fig_height = max(3.0, ROW_HEIGHT * len(rows) + 2.0)
    fig_width = max(12.0, min(24.0, len(window.buckets) * 0.6 + 4.0))
    fig = plt.figure(figsize=(fig_width, fig_height))
    gs = fig.add_gridspec(1, 2, width_ratios=[1.2, 4.0], wspace=0.05, left=0.06, right=0.98, top=0.85, bottom=0.1)
    label_ax = fig.add_subplot(gs[0, 0])
    ax = fig.add_subplot(gs[0, 1], sharey=label_ax)

    ax.set_ylim(-1, max(len(rows), 1))
    ax.invert_yaxis()
    ax.set_xlim(0, 100)
    ax.xaxis.tick_top()
    ticks = [_bucket_offset(bucket, window) for bucket in window.buckets]
    ax.set_xticks(ticks)
    ax.set_xticklabels([bucket.strftime(TICK_FORMATS[window.mode]) for bucket in window.buckets])
    ax.grid(True, axis="x", which="major", linestyle="--", alpha=0.4)
    ax.tick_params(axis="x", labelrotation=30, labelsize=TICK_FONT, pad=4)
    ax.set_yticks([])

    label_ax.set_xlim(0, 1)
    label_ax.axis("off")

    fig.suptitle(title or _default_title(window), x=0.5, fontsize=TITLE_FONT, y=TITLE_Y)
    footer = f"Gantt Studio v{_tool_version()}"
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    for row in rows:
        y = row.order
        placement = row.placement
        label_ax.text(
            0.98,
            y,
            row.title,
            ha="right",
            va="center",
            fontsize=LABEL_FONT,
            fontweight="bold" if row.in_conflict else "normal",
            transform=label_ax.transData,
        )
        ax.barh(
            y,
            width=placement.width,
            left=placement.left,
            height=ROW_HEIGHT,
            color=row.color,
            edgecolor=CONFLICT_EDGE if row.in_conflict else BAR_EDGE,
            linewidth=1.5 if row.in_conflict else 0.5,
            alpha=0.6 if row.completed else 1.0,
        )
        if row.progress:
            ax.barh(
                y,
                width=placement.width * row.progress / 100,
                left=placement.left,
                height=ROW_HEIGHT / 3,
                color="black",
                alpha=PROGRESS_ALPHA,
            )
        if placement.continues_left:
            ax.plot([placement.left], [y], marker="<", color=MARKER_COLOR, markersize=6)
        if placement.continues_right:
            ax.plot([placement.right], [y], marker=">", color=MARKER_COLOR, markersize=6)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def _bucket_offset(bucket: datetime, window: ViewWindow) -> float:
    return (bucket - window.start) / window.duration * 100


def _default_title(window: ViewWindow) -> str:
    if window.mode == "day":
        return window.start.strftime("%A, %d %B %Y")
    if window.mode == "week":
        return f"{window.start:%d %b} - {window.end:%d %b %Y}"
    return window.start.strftime("%B %Y")


def _tool_version() -> str:
    try:
        return metadata.version("gantt-studio")
    except Exception:
        return "0.0.0"
