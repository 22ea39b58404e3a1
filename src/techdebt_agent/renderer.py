from __future__ import annotations
import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .scoring import sort_findings
from .signals import Severity, TechDebtReport


def severity_indicator(severity: Severity) -> str:
    return f"[{severity.value.upper()}]"


def _environment() -> Environment:
    tmpl_dir = os.path.join(os.path.dirname(__file__), "templates")
    env = Environment(
        loader=FileSystemLoader(tmpl_dir),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["indicator"] = severity_indicator
    return env


def render_report(report: TechDebtReport, limit: Optional[int] = None) -> str:
    """Render the plain-text report.

    File blocks keep aggregation order; findings inside a block are sorted by
    severity, most severe first. ``limit`` caps the number of file blocks.
    """
    analyses = [(a.file_path, sort_findings(a.findings)) for a in report.file_analyses]
    hidden = 0
    if limit is not None and len(analyses) > limit:
        hidden = len(analyses) - limit
        analyses = analyses[:limit]
    tmpl = _environment().get_template("report.txt.j2")
    text = tmpl.render(
        summary=report.summary,
        analyses=analyses,
        hidden=hidden,
        errors=report.errors,
    )
    return text.rstrip("\n")
