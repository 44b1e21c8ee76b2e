"""Typer CLI for goalplan."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from goalplan.config import Settings
from goalplan.critical_path import CriticalPath, critical_chains
from goalplan.export import EXPORTERS, export_filename, load_goal, render, save_goal
from goalplan.graph import TaskGraph
from goalplan.models import Goal, Task, TaskStatus
from goalplan.planner import build_goal, critical_path_for, generate_plan, resolve_total_days, set_status
from goalplan.projector import WorkloadLevel, project_days
from goalplan.stats import compute_stats
from goalplan.views import LEVEL_WIDTH_DAYS, dependency_levels, timeline_bars, timeline_markers, to_mermaid

app = typer.Typer(
    name="goalplan",
    help="Turn a goal and a time budget into a scheduled task plan.",
    no_args_is_help=True,
)
console = Console()

BAR_WIDTH = 30

LEVEL_STYLES = {
    WorkloadLevel.FREE: "dim",
    WorkloadLevel.LIGHT: "green",
    WorkloadLevel.MODERATE: "yellow",
    WorkloadLevel.HEAVY: "bold red",
}

PlanFile = Annotated[Optional[str], typer.Option("--file", "-f", help="Plan file (JSON)")]


def _plan_path(file: str | None) -> Path:
    return Path(file or Settings.from_env().plan_file)


def _require_goal(file: str | None) -> tuple[Goal, Path]:
    path = _plan_path(file)
    try:
        goal = load_goal(path)
    except (ValueError, KeyError, TypeError) as e:
        console.print(f"[red]Could not read plan file {path}: {e}[/red]")
        raise typer.Exit(1)
    if goal is None:
        console.print(f"[red]No plan found at {path}. Run 'goalplan plan' first.[/red]")
        raise typer.Exit(1)
    return goal, path


def _parse_date(value: str | None, label: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid {label} '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _critical(goal: Goal) -> CriticalPath:
    try:
        return critical_path_for(goal)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _complete_task_id(incomplete: str) -> list[str]:
    """Shell completion for task IDs. Matches against both ID and title."""
    try:
        goal = load_goal(_plan_path(None))
    except (OSError, ValueError, KeyError, TypeError):
        return []
    if goal is None:
        return []

    q = incomplete.lower()
    return [f"{t.title} ({t.id})" for t in goal.tasks if q in t.id.lower() or q in t.title.lower()]


def _parse_task_id(task_id_arg: str) -> str:
    """Extracts the ID if the user used the autocompleted 'Title (ID)' format."""
    if "(" in task_id_arg and task_id_arg.endswith(")"):
        return task_id_arg.split("(")[-1].strip(")")
    return task_id_arg.strip()


def _bar(left_pct: float, width_pct: float) -> str:
    start = min(BAR_WIDTH - 1, int(round(left_pct / 100 * BAR_WIDTH)))
    length = max(1, int(round(width_pct / 100 * BAR_WIDTH)))
    length = min(length, BAR_WIDTH - start)
    return "·" * start + "█" * length + "·" * (BAR_WIDTH - start - length)


def _status_style(task: Task) -> str | None:
    if task.status == TaskStatus.COMPLETED:
        return "dim"
    if task.status == TaskStatus.IN_PROGRESS:
        return "cyan"
    return None


@app.callback()
def _callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """goalplan: scheduled task plans from a goal and a time budget."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Plan creation
# ---------------------------------------------------------------------------


@app.command()
def plan(
    goal_text: Annotated[str, typer.Argument(help="What you want to achieve")],
    days: Annotated[Optional[float], typer.Option("--days", "-d", help="Total days available")] = None,
    due: Annotated[Optional[str], typer.Option(help="Due date (YYYY-MM-DD); overrides --days")] = None,
    start: Annotated[Optional[str], typer.Option(help="Plan start date (YYYY-MM-DD), default today")] = None,
    offline: Annotated[bool, typer.Option("--offline", help="Skip the AI producer and use templates")] = False,
    file: PlanFile = None,
) -> None:
    """Generate a plan for a goal and save it to the plan file."""
    if not goal_text.strip():
        console.print("[red]Goal text must not be empty.[/red]")
        raise typer.Exit(1)

    settings = Settings.from_env()
    if offline:
        settings = replace(settings, openai_api_key="")

    try:
        result = asyncio.run(
            generate_plan(
                goal_text.strip(),
                days,
                _parse_date(due, "due date"),
                start_date=_parse_date(start, "start date"),
                settings=settings,
            )
        )
    except ValueError as e:
        console.print(f"[red]Could not generate a plan: {e}[/red]")
        raise typer.Exit(1)

    path = _plan_path(file)
    save_goal(result.goal, path)
    console.print(
        f"[green]Planned {len(result.goal.tasks)} tasks over {result.goal.total_days:g} days "
        f"({result.source}) -> {path}[/green]"
    )
    if result.report.rescaled:
        console.print(
            f"[dim]Raw schedule took {result.report.horizon:.1f} days; "
            f"compressed by {result.report.scale_factor:.2f}x to fit.[/dim]"
        )
    _print_timeline(result.goal, _critical(result.goal))


@app.command("import")
def import_tasks(
    source: Annotated[str, typer.Argument(help="JSON file with a raw task list (or {'tasks': [...]})")],
    title: Annotated[Optional[str], typer.Option(help="Goal title, default the file name")] = None,
    days: Annotated[Optional[float], typer.Option("--days", "-d", help="Total days available")] = None,
    due: Annotated[Optional[str], typer.Option(help="Due date (YYYY-MM-DD); overrides --days")] = None,
    start: Annotated[Optional[str], typer.Option(help="Plan start date (YYYY-MM-DD), default today")] = None,
    file: PlanFile = None,
) -> None:
    """Schedule a task list produced elsewhere.

    Records use the producer format: title, description, category, priority,
    estimatedDurationDays and dependsOn (indices into the same list).
    """
    src = Path(source)
    try:
        raw = json.loads(src.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {source}: {e}[/red]")
        raise typer.Exit(1)

    records = raw.get("tasks", []) if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        console.print("[red]Expected a list of tasks.[/red]")
        raise typer.Exit(1)
    records = [r for r in records if isinstance(r, dict)]

    start_date = _parse_date(start, "start date") or date.today()
    due_date = _parse_date(due, "due date")
    try:
        total_days = resolve_total_days(days, due_date, start_date, Settings.from_env().default_total_days)
        goal, report = build_goal(title or src.stem, records, total_days, start_date, due_date)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    path = _plan_path(file)
    save_goal(goal, path)
    console.print(f"[green]Scheduled {len(goal.tasks)} tasks over {total_days:g} days -> {path}[/green]")
    if report.rescaled:
        console.print(f"[dim]Compressed by {report.scale_factor:.2f}x to fit.[/dim]")


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def _print_timeline(goal: Goal, crit: CriticalPath) -> None:
    table = Table(title=f"Timeline: {goal.title}")
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("Category")
    table.add_column("Priority")
    table.add_column("Days", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column(f"0 … {goal.total_days:g}d")
    table.add_column("Status")

    for bar in timeline_bars(goal):
        t = bar.task
        style = _status_style(t) or ("bold yellow" if t.id in crit else None)
        table.add_row(
            t.id,
            t.title,
            t.category.value,
            t.priority.value,
            f"{t.estimated_duration_days:.1f}",
            t.start_date.strftime("%b %d") if t.start_date else "-",
            t.end_date.strftime("%b %d") if t.end_date else "-",
            _bar(bar.left_pct, bar.width_pct),
            t.status.value,
            style=style,
        )
    console.print(table)
    markers = ", ".join(f"{m:g}" for m in timeline_markers(goal.total_days))
    console.print(f"[dim]Markers (days): {markers}. Critical tasks in yellow.[/dim]")


@app.command()
def timeline(file: PlanFile = None) -> None:
    """Show the plan as a timeline (Gantt) table."""
    goal, _ = _require_goal(file)
    _print_timeline(goal, _critical(goal))


@app.command()
def daily(
    days: Annotated[Optional[int], typer.Option("--days", "-n", help="Number of days to show")] = None,
    show_free: Annotated[bool, typer.Option("--show-free", help="Include days with nothing scheduled")] = False,
    file: PlanFile = None,
) -> None:
    """Show a day-by-day breakdown of the plan."""
    goal, _ = _require_goal(file)

    shown = 0
    for day in project_days(goal):
        if days is not None and shown >= days:
            break
        if not day.tasks and not show_free:
            continue

        level_style = LEVEL_STYLES[day.level]
        console.print(
            f"\n[bold underline]Day {day.day_number + 1} · {day.date.strftime('%a %b %d, %Y')}[/bold underline]"
            f"  [{level_style}]{day.level.value} ({day.workload})[/{level_style}]"
        )

        if day.tasks:
            table = Table(show_header=True, box=None, pad_edge=False)
            table.add_column("ID", style="bold")
            table.add_column("Task")
            table.add_column("Priority")
            table.add_column("Progress", justify="right")
            table.add_column("", justify="right")

            for entry in day.tasks:
                flags = []
                if entry.is_start:
                    flags.append("[green]START[/green]")
                if entry.is_end:
                    flags.append("[blue]END[/blue]")
                if entry.is_continuing:
                    flags.append("[dim]CONT[/dim]")
                table.add_row(
                    entry.task.id,
                    entry.task.title,
                    entry.task.priority.value,
                    f"{entry.progress:.0f}%",
                    " ".join(flags),
                )
            console.print(table)

        for milestone in day.milestones:
            console.print(f"  [magenta]◆ {milestone}[/magenta]")
        shown += 1

    if shown == 0:
        console.print("Nothing scheduled.")


@app.command()
def graph(file: PlanFile = None) -> None:
    """Show dependencies grouped by start window, with the critical path marked."""
    goal, _ = _require_goal(file)
    crit = _critical(goal)
    titles = {t.id: t.title for t in goal.tasks}

    console.print(
        f"\n[bold]{len(crit)} task(s) on the critical path.[/bold] "
        "Delays in these tasks will affect the overall timeline."
    )
    for level, tasks in dependency_levels(goal):
        console.print(f"\n[bold underline]Days {level * LEVEL_WIDTH_DAYS}-{(level + 1) * LEVEL_WIDTH_DAYS}[/bold underline]")
        for t in tasks:
            mark = "[bold yellow]★[/bold yellow] " if t.id in crit else "  "
            console.print(f"  {mark}{t.id} {t.title} [dim]({t.category.value}, {t.estimated_duration_days:.1f}d)[/dim]")
            for dep in t.dependencies:
                console.print(f"      [dim]← {dep} {titles.get(dep, '?')}[/dim]")


@app.command("critical-path")
def critical_path(
    sort: Annotated[str, typer.Option(help="Sort order: topo (default), chrono, chain")] = "topo",
    file: PlanFile = None,
) -> None:
    """Display only the tasks on the critical path."""
    goal, _ = _require_goal(file)
    crit = _critical(goal)
    if not crit:
        console.print("No critical path found.")
        return

    by_id = {t.id: t for t in goal.tasks}
    crit_tasks = [by_id[tid] for tid in crit.task_ids]

    if sort == "chrono":
        crit_tasks.sort(key=lambda t: t.start_day)
        _print_critical_table(crit_tasks, title="Critical Path (chronological)")
    elif sort == "chain":
        chains = critical_chains(TaskGraph(goal.tasks), crit)
        for i, chain in enumerate(chains, 1):
            chain_tasks = [by_id[tid] for tid in chain]
            chain_days = sum(t.estimated_duration_days for t in chain_tasks)
            console.print(f"\n[bold]Chain {i}[/bold]  ({chain_days:.1f}d)")
            _print_critical_table(chain_tasks, title=None)
        console.print(f"\n[dim]{len(chains)} chain(s), {len(crit)} critical tasks total[/dim]")
    else:
        _print_critical_table(crit_tasks, title="Critical Path")

    console.print(f"\nCritical path length: [bold]{crit.length:.1f}[/bold] days")


def _print_critical_table(tasks_list: list[Task], title: str | None) -> None:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Task")
    table.add_column("Days")
    table.add_column("Start day")
    table.add_column("End day")
    table.add_column("Dates")

    for t in tasks_list:
        dates = f"{t.start_date:%b %d} - {t.end_date:%b %d}" if t.start_date and t.end_date else "-"
        table.add_row(
            t.id,
            t.title,
            f"{t.estimated_duration_days:.1f}",
            f"{t.start_day:.1f}",
            f"{t.end_day:.1f}",
            dates,
            style=_status_style(t),
        )
    console.print(table)


@app.command()
def stats(file: PlanFile = None) -> None:
    """Plan overview: progress, priorities, categories and schedule length."""
    goal, _ = _require_goal(file)
    s = compute_stats(goal, critical_task_count=len(_critical(goal)))

    filled = int(BAR_WIDTH * s.progress_pct / 100)
    bar = f"[green]{'█' * filled}[/green][dim]{'░' * (BAR_WIDTH - filled)}[/dim]"

    console.print(f"\n[bold underline]{goal.title}[/bold underline]\n")
    console.print(
        f"  Tasks:  [green]{s.completed_tasks} completed[/green]  [yellow]{s.in_progress_tasks} in progress[/yellow]"
        f"  {s.pending_tasks} pending  ({s.total_tasks} total)"
    )
    console.print(f"  Progress: {bar} {s.progress_pct:.0f}%")
    console.print(f"  Budget: {goal.total_days:g} days from {goal.start_date:%a %b %d, %Y}")
    console.print(f"  Schedule length: [bold]{s.schedule_length_days:.1f}[/bold] days")
    console.print(f"  Average task: {s.avg_duration_days:.1f} days")
    console.print(f"  Critical path: {s.critical_task_count} tasks")
    console.print("  Priority: " + "  ".join(f"{k} {v}" for k, v in s.by_priority.items()))
    console.print("  Category: " + "  ".join(f"{k} {v}" for k, v in s.by_category.items()))
    console.print()


# ---------------------------------------------------------------------------
# Status and export
# ---------------------------------------------------------------------------


@app.command("set-status")
def set_status_cmd(
    task_id: Annotated[str, typer.Argument(autocompletion=_complete_task_id)],
    status: Annotated[str, typer.Argument(help="Target status: pending, in_progress, completed")],
    file: PlanFile = None,
) -> None:
    """Change one task's status. The schedule itself is never touched."""
    task_id = _parse_task_id(task_id)
    try:
        new_status = TaskStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in TaskStatus)
        console.print(f"[red]Invalid status '{status}'. Valid statuses: {valid}[/red]")
        raise typer.Exit(1)

    goal, path = _require_goal(file)
    old = goal.task(task_id)
    if old is None:
        console.print(f"[red]Task {task_id} not found.[/red]")
        raise typer.Exit(1)
    if old.status == new_status:
        console.print(f"{task_id} is already {new_status.value}.")
        return

    save_goal(set_status(goal, task_id, new_status), path)
    console.print(f"[green]Set {task_id} from {old.status.value} to {new_status.value}.[/green]")


@app.command()
def export(
    fmt: Annotated[str, typer.Argument(help=f"Format: {', '.join(EXPORTERS)}")],
    output: Annotated[Optional[str], typer.Option("-o", "--output", help="Output file path")] = None,
    file: PlanFile = None,
) -> None:
    """Export the plan as JSON, CSV, Markdown or iCalendar."""
    goal, _ = _require_goal(file)
    fmt = fmt.lower()
    try:
        content = render(goal, fmt)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    out = Path(output or export_filename(goal, fmt))
    out.write_text(content, newline="")
    console.print(f"[green]Exported {len(goal.tasks)} tasks to {out}[/green]")


@app.command()
def viz(
    output: Annotated[str, typer.Option("-o", "--output", help="Output file path")] = "plan.md",
    hide_done: bool = False,
    file: PlanFile = None,
) -> None:
    """Generate a Mermaid flowchart of the task dependencies."""
    goal, _ = _require_goal(file)
    Path(output).write_text(to_mermaid(goal, _critical(goal), hide_done=hide_done))
    console.print(f"[green]Wrote Mermaid diagram to {output}[/green]")


@app.command("viz-html")
def viz_html(
    output: Annotated[str, typer.Option("-o", "--output", help="Output file path")] = "plan.html",
    hide_done: bool = False,
    file: PlanFile = None,
) -> None:
    """Generate an interactive PyVis HTML view of the task dependencies."""
    from pyvis.network import Network

    goal, _ = _require_goal(file)
    crit = _critical(goal)

    net = Network(height="800px", width="100%", directed=True, notebook=False)

    shown = {t.id for t in goal.tasks if not (hide_done and t.status == TaskStatus.COMPLETED)}
    for t in goal.tasks:
        if t.id not in shown:
            continue
        if t.status == TaskStatus.COMPLETED:
            color, font_color = "#2d6a4f", "#d8f3dc"
        elif t.status == TaskStatus.IN_PROGRESS:
            color, font_color = "#e76f51", "#ffffff"
        elif t.id in crit:
            color, font_color = "#d4a373", "#000000"
        else:
            color, font_color = "#457b9d", "#f1faee"

        net.add_node(
            t.id,
            label=f"{t.id}\n{t.title}\n{t.estimated_duration_days:.1f}d",
            title=f"{t.category.value} · {t.priority.value}",
            color=color,
            shape="box",
            font={"color": font_color, "face": "Helvetica", "size": 14},
        )

    for t in goal.tasks:
        for dep in t.dependencies:
            if t.id in shown and dep in shown:
                net.add_edge(dep, t.id, color="#bdc3c7")

    net.set_options("""
    var options = {
      "nodes": {"margin": 10, "widthConstraint": {"maximum": 220}},
      "edges": {
        "smooth": {"type": "cubicBezier", "forceDirection": "horizontal", "roundness": 0.4},
        "arrows": {"to": {"enabled": true, "scaleFactor": 0.6}}
      },
      "layout": {
        "hierarchical": {
          "enabled": true,
          "direction": "LR",
          "sortMethod": "directed",
          "levelSeparation": 280,
          "nodeSpacing": 120
        }
      },
      "physics": {"enabled": false},
      "interaction": {"navigationButtons": true, "dragNodes": true, "hover": true}
    }
    """)

    net.save_graph(output)
    console.print(f"[green]Wrote interactive HTML diagram to {output}[/green]")


if __name__ == "__main__":
    app()
