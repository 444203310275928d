from __future__ import annotations

import json
from typing import Any

from ..analysis import AnalysisReport


def build_payload(report: AnalysisReport) -> list[dict[str, Any]]:
    return [result.to_dict() for result in report.results]


def format_json(report: AnalysisReport, indent: int | None = 2) -> str:
    return json.dumps(build_payload(report), indent=indent)
