"""Serialise evidence reports to JSON-ready data and Markdown."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader

from ..models import EvidenceReport, to_dict

TEMPLATES_DIR = Path(__file__).with_name("templates")


def report_to_dict(report: EvidenceReport) -> Dict[str, Any]:
    data: Dict[str, Any] = to_dict(report)
    data["consistency"]["overall"] = report.consistency.overall
    return data


def report_to_json(report: EvidenceReport) -> str:
    return json.dumps(report_to_dict(report), indent=2, sort_keys=True)


def render_markdown(report: EvidenceReport, templates_dir: Path | None = None) -> str:
    """Render ``report.md.j2``, preferring a copy in ``templates_dir`` when given."""
    directories = [str(templates_dir)] if templates_dir else []
    directories.append(str(TEMPLATES_DIR))
    env = Environment(
        loader=FileSystemLoader(directories), autoescape=False, trim_blocks=True, lstrip_blocks=True
    )
    template = env.get_template("report.md.j2")
    variations = [item for metric in report.consistency.metrics for item in metric.variations]
    return template.render(report=report, variations=variations).strip() + "\n"


__all__ = ["TEMPLATES_DIR", "render_markdown", "report_to_dict", "report_to_json"]
