"""Terminal rendering for plans, progress, reports and status."""

from __future__ import annotations

from collections.abc import Sequence

import click

from .component import ComponentStatus
from .plan import ExecutionReport, Operation, OperationProgress, PlanSummary
from .subsystem import Subsystem


def format_operation(op: Operation) -> str:
    text = f"{click.style(str(op.verb), fg=op.verb.color, dim=op.verb.color is None)} {op.target}"
    if op.details:
        text += " " + click.style(f"({op.details})", dim=True)
    return text


def format_summary(summary: PlanSummary) -> str:
    """Render a plan preview.

    Composite summaries list their operations grouped by section.
    """
    lines = [click.style(summary.title, bold=True)]

    if not summary.operations:
        lines.append("  " + click.style("No operations", dim=True))
    elif summary.sections:
        for section in summary.sections:
            if not section.operations:
                continue
            lines.append(f"  {section.title}")
            lines.extend(f"    ▸ {format_operation(op)}" for op in section.operations)
    else:
        lines.extend(f"  ▸ {format_operation(op)}" for op in summary.operations)

    if summary.warnings:
        lines.append("")
        lines.append(click.style("Warnings", fg="yellow") + ":")
        lines.extend(f"  {click.style('⚠', fg='yellow')} {w}" for w in summary.warnings)

    count = summary.action_count()
    if count > 0:
        lines.append("")
        lines.append(f"{count} operation(s) to perform")

    return "\n".join(lines)


def format_progress(progress: OperationProgress) -> str:
    result = progress.result
    prefix = f"[{progress.current}/{progress.total}]"
    op = format_operation(result.operation)
    if result.success:
        return f"{prefix} {click.style('✓', fg='green')} {op}"
    return f"{prefix} {click.style('✗', fg='red')} {op}: {result.error}"


def print_progress(progress: OperationProgress) -> None:
    click.echo(format_progress(progress))


def format_report(report: ExecutionReport) -> str:
    """Render the outcome of an execution. Only failures are listed."""
    success = report.success_count()
    failed = report.failure_count()

    if failed == 0:
        return click.style(f"✓ {success} operation(s) completed", fg="green")

    lines = [click.style(f"⚠ {success} succeeded, {failed} failed", fg="yellow"), "", "Failures:"]
    for result in report.failures():
        lines.append(f"  {click.style('✗', fg='red')} {result.operation.target}: {result.error}")
    return "\n".join(lines)


def render_table(
    headers: list[str], rows: Sequence[Sequence[str]], alignments: list[str] | None = None
) -> str:
    """Render rows as a box table.

    Example output:
        +--------+-------+
        | Name   | Count |
        +--------+-------+
        | item-1 |    10 |
        +--------+-------+
    """
    if not headers:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))
    aligns = alignments or ["l"] * len(headers)

    def line(cells: Sequence[str], header: bool = False) -> str:
        padded = []
        for i, cell in enumerate(cells):
            if not header and aligns[i] == "r":
                padded.append(cell.rjust(widths[i]))
            else:
                padded.append(cell.ljust(widths[i]))
        return "| " + " | ".join(padded) + " |"

    separator = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    lines = [separator, line(headers, header=True), separator]
    lines.extend(line(row) for row in rows)
    lines.append(separator)
    return "\n".join(lines)


def format_status_table(statuses: Sequence[ComponentStatus]) -> str:
    rows = []
    for status in statuses:
        state = "synced" if status.is_synced() else "drift"
        if status.is_synced() and status.untracked:
            state = "untracked"
        rows.append(
            [
                status.name,
                str(status.total),
                str(status.synced),
                str(status.pending),
                str(status.to_update),
                str(status.untracked),
                state,
            ]
        )
    return render_table(
        ["Subsystem", "Total", "Synced", "Pending", "Update", "Untracked", "State"],
        rows,
        ["l", "r", "r", "r", "r", "r", "l"],
    )


def format_subsystem_table(subsystems: Sequence[Subsystem]) -> str:
    rows = [
        [
            s.id,
            s.name,
            "yes" if s.supports_capture() else "no",
            "yes" if s.supports_sync() else "no",
        ]
        for s in subsystems
    ]
    return render_table(["ID", "Name", "Capture", "Sync"], rows)
