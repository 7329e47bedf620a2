"""
Final JSON output for an analysis.

The output object has exactly two keys: ``charts_to_generate`` and
``full_analysis_report_markdown``. Charts are validated and trimmed, the
report is trimmed and its line endings normalized to ``\\n``.
"""
import json
import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from analyst.core.errors import OutputFormattingError
from analyst.core.schemas import AnalysisOutput, ChartRecommendation

logger = logging.getLogger(__name__)

VALID_CHART_TYPES = ("bar", "line", "scatter")
OUTPUT_KEYS = ("charts_to_generate", "full_analysis_report_markdown")
CHART_FIELDS = {"title": "title", "type": "type", "xAxis": "x_axis", "yAxis": "y_axis"}


def _chart_field(chart: Any, wire_name: str) -> Any:
    if isinstance(chart, Mapping):
        return chart.get(wire_name, chart.get(CHART_FIELDS[wire_name]))
    return getattr(chart, CHART_FIELDS[wire_name], None)


def validate_chart(chart: Any, index: int) -> ChartRecommendation:
    """Trimmed copy of one chart; raises OutputFormattingError if malformed."""
    if not isinstance(chart, (ChartRecommendation, Mapping)):
        raise OutputFormattingError(f"Chart at index {index} must be an object")

    values = {}
    for wire_name in CHART_FIELDS:
        value = _chart_field(chart, wire_name)
        if not isinstance(value, str):
            raise OutputFormattingError(f"Chart at index {index} must have a valid string '{wire_name}' property")
        if not value.strip():
            raise OutputFormattingError(f"Chart at index {index} must have a non-empty {wire_name}")
        values[wire_name] = value.strip()

    if values["type"] not in VALID_CHART_TYPES:
        raise OutputFormattingError(
            f"Chart at index {index} has invalid type '{values['type']}'. "
            f"Must be one of: {', '.join(VALID_CHART_TYPES)}"
        )

    return ChartRecommendation(**values)


def normalize_markdown(report: str) -> str:
    return report.strip().replace("\r\n", "\n").replace("\r", "\n")


class JsonOutputFormatter:
    """Builds, serializes and re-validates the final analysis output."""

    def format_output(self, charts: Sequence[Any], report_markdown: str) -> AnalysisOutput:
        if isinstance(charts, (str, bytes)) or not isinstance(charts, Iterable):
            raise OutputFormattingError("Charts must be provided as a list")
        if not isinstance(report_markdown, str):
            raise OutputFormattingError("Report markdown must be provided as a string")
        if not report_markdown.strip():
            raise OutputFormattingError("Report markdown cannot be empty")

        formatted: List[ChartRecommendation] = [validate_chart(chart, i) for i, chart in enumerate(charts)]
        logger.debug(f"Formatted output with {len(formatted)} charts")
        return AnalysisOutput(
            charts_to_generate=formatted,
            full_analysis_report_markdown=normalize_markdown(report_markdown),
        )

    def to_dict(self, output: AnalysisOutput) -> dict:
        return output.model_dump(by_alias=True)

    def to_json_string(self, output: AnalysisOutput, indent: Optional[int] = None) -> str:
        """Serialize with camelCase chart keys and nothing around the JSON."""
        try:
            text = json.dumps(self.to_dict(output), ensure_ascii=False, indent=indent)
        except (TypeError, ValueError) as e:
            raise OutputFormattingError(f"Failed to convert output to JSON: {e}") from e
        if not text.strip():
            raise OutputFormattingError("JSON serialization produced an empty result")
        return text

    def validate_json_string(self, text: str) -> AnalysisOutput:
        """Parse a serialized output, rejecting surrounding text or extra keys."""
        if not isinstance(text, str):
            raise OutputFormattingError("Input must be a string")
        if text.strip() != text:
            raise OutputFormattingError("JSON string contains leading or trailing whitespace")

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise OutputFormattingError(f"Invalid JSON format: {e.msg}") from e

        if not isinstance(parsed, dict):
            raise OutputFormattingError("Output must be an object")
        for key in OUTPUT_KEYS:
            if key not in parsed:
                raise OutputFormattingError(f"Output must contain '{key}' property")
        extra = [key for key in parsed if key not in OUTPUT_KEYS]
        if extra:
            raise OutputFormattingError(f"Output contains unexpected properties: {', '.join(extra)}")

        try:
            return self.format_output(parsed["charts_to_generate"], parsed["full_analysis_report_markdown"])
        except ValidationError as e:
            raise OutputFormattingError(f"Output failed validation: {e}") from e
