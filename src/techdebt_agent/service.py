from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .config import resolve_configuration
from .errors import ErrorCategory, TechDebtError, validation_error
from .renderer import render_report
from .scanner import scan_directory
from .signals import TechDebtReport

logger = logging.getLogger(__name__)

TOOL_NAME = "list-tech-debt"
TOOL_DESCRIPTION = "List possible technical debt areas in the project source code."


@dataclass(frozen=True)
class ToolResponse:
    success: bool
    formatted_report: str
    report: Optional[TechDebtReport] = None
    error: Optional[TechDebtError] = None

    def to_content(self) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.formatted_report}],
            "isError": not self.success,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "report": self.report.to_dict() if self.report is not None else None,
            "error": self.error.to_dict() if self.error is not None else None,
            "formattedReport": self.formatted_report,
        }


def _parse_limit(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise validation_error(f"Invalid limit {value!r}. Expected a positive integer", limit=value)
    return value


class TechDebtService:
    """Entry point for the ``list-tech-debt`` tool.

    Built once by the hosting process; ``defaults`` are merged under every
    request's configuration. Each call is independent and keeps no state.
    """

    name = TOOL_NAME
    description = TOOL_DESCRIPTION

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None):
        self.defaults = dict(defaults or {})

    def list_tech_debt(self, params: Optional[Mapping[str, Any]] = None) -> ToolResponse:
        params = params or {}
        try:
            return self._run(params)
        except TechDebtError as e:
            return self._failure(e)
        except Exception as e:
            logger.exception("Unexpected failure while scanning")
            return self._failure(
                TechDebtError(
                    f"Unexpected error: {e}",
                    ErrorCategory.CONFIGURATION,
                    recoverable=False,
                    context={"exception": type(e).__name__},
                )
            )

    def _run(self, params: Mapping[str, Any]) -> ToolResponse:
        limit = _parse_limit(params.get("limit"))
        resolved = resolve_configuration(
            directory=params.get("directory"),
            include_types=params.get("includeTypes"),
            severity=params.get("severity"),
            overrides=self.defaults,
        )
        config = resolved.unwrap()
        report = scan_directory(config).unwrap()
        return ToolResponse(success=True, formatted_report=render_report(report, limit=limit), report=report)

    def _failure(self, error: TechDebtError) -> ToolResponse:
        logger.error("%s failed (%s): %s", self.name, error.category.value, error.message)
        return ToolResponse(success=False, formatted_report=f"Error: {error.message}", error=error)
