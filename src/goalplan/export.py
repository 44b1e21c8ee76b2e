"""Plan exports (JSON, CSV, Markdown, iCalendar) and JSON plan files."""

from __future__ import annotations

import csv
import io
import json
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path

from goalplan.models import Goal, TaskPriority

ICS_PRIORITY = {TaskPriority.HIGH: 1, TaskPriority.MEDIUM: 5, TaskPriority.LOW: 9}


def to_json(goal: Goal) -> str:
    return json.dumps(goal.to_dict(), indent=2)


def to_csv(goal: Goal) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["ID", "Task", "Category", "Priority", "Duration (days)", "Start Date", "End Date", "Status", "Description"])
    for t in goal.tasks:
        writer.writerow([
            t.id,
            t.title,
            t.category.value,
            t.priority.value,
            f"{t.estimated_duration_days:.1f}",
            t.start_date.isoformat() if t.start_date else "",
            t.end_date.isoformat() if t.end_date else "",
            t.status.value,
            t.description,
        ])
    return buf.getvalue()


def to_markdown(goal: Goal) -> str:
    lines = [f"# {goal.title}", ""]
    lines.append(f"**Duration:** {goal.total_days:g} days")
    lines.append(f"**Total Tasks:** {len(goal.tasks)}")
    lines.append(f"**Start:** {goal.start_date.isoformat()}")
    if goal.due_date:
        lines.append(f"**Due:** {goal.due_date.isoformat()}")
    lines.append(f"**Created:** {goal.created_at.date().isoformat()}")
    lines.append("")

    # Categories in order of first appearance
    categories = list(dict.fromkeys(t.category for t in goal.tasks))
    for category in categories:
        lines.append(f"## {category.value}")
        lines.append("")
        for t in goal.tasks:
            if t.category != category:
                continue
            lines.append(f"### {t.title}")
            lines.append(f"- **Priority:** {t.priority.value}")
            lines.append(f"- **Duration:** {t.estimated_duration_days:.1f} days")
            if t.start_date and t.end_date:
                lines.append(f"- **Timeline:** {t.start_date.isoformat()} - {t.end_date.isoformat()}")
            lines.append(f"- **Status:** {t.status.value}")
            if t.description:
                lines.append(f"- **Description:** {t.description}")
            if t.dependencies:
                lines.append(f"- **Dependencies:** {', '.join(t.dependencies)}")
            lines.append("")
    return "\n".join(lines)


def _ics_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def to_ics(goal: Goal, now: datetime | None = None) -> str:
    """One all-day VEVENT per task. DTEND is exclusive, so it is at least DTSTART + 1."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//goalplan//EN",
        "CALSCALE:GREGORIAN",
    ]
    for t in goal.tasks:
        start = t.start_date or goal.start_date
        end = t.end_date or start
        if end <= start:
            end = start + timedelta(days=1)
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:{goal.id}-{t.id}@goalplan",
            f"DTSTAMP:{stamp}",
            f"DTSTART;VALUE=DATE:{start.strftime('%Y%m%d')}",
            f"DTEND;VALUE=DATE:{end.strftime('%Y%m%d')}",
            f"SUMMARY:{_ics_escape(t.title)}",
            "DESCRIPTION:" + _ics_escape(
                f"{t.description}\nCategory: {t.category.value}\nPriority: {t.priority.value}"
            ),
            f"CATEGORIES:{_ics_escape(t.category.value)}",
            f"PRIORITY:{ICS_PRIORITY[t.priority]}",
            "END:VEVENT",
        ])
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


EXPORTERS = {
    "json": (to_json, ".json"),
    "csv": (to_csv, ".csv"),
    "md": (to_markdown, ".md"),
    "ics": (to_ics, ".ics"),
}


def export_filename(goal: Goal, fmt: str) -> str:
    stem = re.sub(r"\s+", "_", goal.title.strip()) or "plan"
    stem = re.sub(r"[^\w.-]", "", stem)[:80] or "plan"
    return stem + EXPORTERS[fmt][1]


def render(goal: Goal, fmt: str) -> str:
    if fmt not in EXPORTERS:
        raise ValueError(f"Unknown export format '{fmt}'. Use: {', '.join(EXPORTERS)}")
    return EXPORTERS[fmt][0](goal)


# ---------------------------------------------------------------------------
# Plan files
# ---------------------------------------------------------------------------


def save_goal(goal: Goal, path: str | Path) -> None:
    Path(path).write_text(to_json(goal))


def load_goal(path: str | Path) -> Goal | None:
    """Read a JSON export back. Returns None when the file doesn't exist."""
    p = Path(path)
    if not p.exists():
        return None
    return Goal.from_dict(json.loads(p.read_text()))
