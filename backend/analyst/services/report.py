"""
Markdown analysis report.

The report has five top-level sections: Executive Summary, Statistical
Analysis, Relationship Analysis, Key Business Questions and Conclusion and
Next Steps. A section that fails to render is replaced by a short fallback
section; if the whole report fails, a generic fallback report is returned.
"""
import logging
from typing import Callable, List

from analyst.core.errors import ReportGenerationError
from analyst.core.performance import track_performance
from analyst.core.schemas import BusinessInsights, ColumnInfo, DataQualityMetrics

logger = logging.getLogger(__name__)

TYPE_SECTIONS = [
    ("numerical", "Numerical Columns"),
    ("categorical", "Categorical Columns"),
    ("datetime", "Temporal Columns"),
    ("text", "Text Columns"),
]


def _missing_suffix(column: ColumnInfo) -> str:
    return ", contains missing values" if column.has_nulls else ""


def _describe_column(column: ColumnInfo) -> str:
    if column.type == "numerical":
        detail = f"{column.unique_values} unique values"
    elif column.type == "categorical":
        detail = f"{column.unique_values} categories"
    elif column.type == "datetime":
        detail = "Time-series data"
    else:
        detail = "Text data"
    return f"- **{column.name}**: {detail}{_missing_suffix(column)}"


def render_executive_summary(insights: BusinessInsights) -> str:
    lines = [
        "# Executive Summary",
        "",
        f"This dataset appears to be from the **{insights.industry_domain}** domain, presenting "
        f"significant opportunities for data-driven insights and strategic decision-making.",
        "",
    ]
    if insights.primary_value_columns:
        lines += [
            f"The analysis identifies **{', '.join(insights.primary_value_columns)}** as the primary "
            f"value-driving columns, which should be the focus of detailed analytical exploration.",
            "",
        ]
    lines.append(insights.dataset_potential)
    return "\n".join(lines)


def render_statistical_findings(columns: List[ColumnInfo], quality: DataQualityMetrics) -> str:
    lines = ["# Statistical Analysis", "", "## Dataset Overview", "", f"- **Total Columns**: {len(columns)}"]

    for column_type, _ in TYPE_SECTIONS:
        count = sum(1 for c in columns if c.type == column_type)
        if count:
            lines.append(f"- **{column_type.capitalize()} Columns**: {count}")

    lines += [
        f"- **Data Completeness**: {quality.completeness * 100:.1f}%",
        f"- **Data Consistency**: {quality.consistency * 100:.1f}%",
        "",
    ]

    if quality.issues:
        lines += ["## Data Quality Issues", ""]
        lines += [f"- {issue}" for issue in quality.issues]
        lines.append("")

    lines += ["## Column Analysis", ""]
    for column_type, heading in TYPE_SECTIONS:
        typed = [c for c in columns if c.type == column_type]
        if typed:
            lines.append(f"### {heading}")
            lines += [_describe_column(c) for c in typed]
            lines.append("")

    return "\n".join(lines).strip()


def render_relationship_insights(insights: BusinessInsights) -> str:
    lines = ["# Relationship Analysis", ""]
    if not insights.potential_correlations:
        lines += [
            "No significant relationships were identified in the current dataset structure.",
            "",
            "Consider collecting additional data points to enable correlation analysis.",
        ]
        return "\n".join(lines)

    lines += ["The following potential relationships and patterns have been identified:", ""]
    for number, correlation in enumerate(insights.potential_correlations, start=1):
        lines += [
            f"{number}. **{correlation}**",
            "   - This relationship could provide insights into data dependencies and business drivers",
            "   - Recommended for detailed statistical analysis and visualization",
            "",
        ]

    lines += [
        "## Analytical Recommendations",
        "",
        "- Conduct correlation analysis for numerical relationships",
        "- Perform segmentation analysis for categorical relationships",
        "- Create cross-tabulations to explore categorical interactions",
        "- Use time-series analysis for temporal patterns",
        "- Consider multivariate analysis to understand complex relationships",
    ]
    return "\n".join(lines)


def render_actionable_questions(insights: BusinessInsights) -> str:
    lines = [
        "# Key Business Questions",
        "",
        "Based on the dataset analysis, the following strategic questions can be addressed:",
        "",
    ]
    for number, question in enumerate(insights.actionable_questions, start=1):
        lines += [
            f"## {number}. {question}",
            "",
            "This question can be explored through:",
            "- Detailed data visualization and statistical analysis",
            "- Comparative analysis across different segments",
            "- Trend analysis and pattern identification",
            "- Performance benchmarking and optimization strategies",
            "",
        ]
    return "\n".join(lines).strip()


def render_conclusion(insights: BusinessInsights) -> str:
    return "\n".join([
        "# Conclusion and Next Steps",
        "",
        "## Dataset Potential",
        "",
        insights.dataset_potential,
        "",
        "## Recommended Actions",
        "",
        "1. **Immediate Analysis**: Begin with the recommended visualizations to understand data distributions and relationships",
        "",
        "2. **Deep Dive Investigation**: Focus analytical efforts on the identified primary value columns and key relationships",
        "",
        "3. **Business Integration**: Connect analytical findings to specific business processes and decision-making workflows",
        "",
        "4. **Data Enhancement**: Consider collecting additional data points to strengthen analytical capabilities",
        "",
        "5. **Continuous Monitoring**: Establish regular analysis cycles to track performance and identify emerging patterns",
        "",
        "## Strategic Value",
        "",
        f"This dataset provides a solid foundation for {insights.industry_domain.lower()} analytics, "
        "with clear pathways to actionable insights and measurable business impact.",
    ])


def _render_section(name: str, render: Callable[[], str], fallback: str) -> str:
    try:
        return render()
    except Exception as e:
        logger.warning(f"{name} section failed, using fallback section: {e}")
        return fallback


def render_fallback_report(columns: List[ColumnInfo], insights: BusinessInsights) -> str:
    domain = insights.industry_domain or "business"
    return "\n".join([
        "# Analysis Report",
        "",
        "## Executive Summary",
        "",
        f"This dataset contains {len(columns)} columns and appears to be from the {domain.lower()} domain. "
        "While detailed analysis encountered some limitations, the dataset shows potential for basic analytical insights.",
        "",
        "## Dataset Overview",
        "",
        f"- **Total Columns**: {len(columns)}",
        "- **Analysis Status**: Completed with fallback methods",
        f"- **Domain**: {domain}",
        "",
        "## Recommendations",
        "",
        "1. **Data Quality**: Consider improving data completeness and consistency",
        "2. **Analysis Enhancement**: Additional context and data preprocessing may improve insights",
        "3. **Business Integration**: Connect findings to specific business processes and decisions",
        "",
        "## Conclusion",
        "",
        f"This dataset provides a starting point for analytical work in the {domain.lower()} context.",
    ])


@track_performance("generate_analysis_report")
def generate_analysis_report(columns: List[ColumnInfo], insights: BusinessInsights,
                             quality: DataQualityMetrics) -> str:
    """Render the full Markdown report."""
    try:
        sections = [
            _render_section(
                "Executive summary",
                lambda: render_executive_summary(insights),
                f"# Executive Summary\n\nThis dataset from the {insights.industry_domain or 'business'} domain "
                f"contains analytical opportunities for data-driven insights.",
            ),
            _render_section(
                "Statistical analysis",
                lambda: render_statistical_findings(columns, quality),
                f"# Statistical Analysis\n\n## Dataset Overview\n\n- **Total Columns**: {len(columns)}\n"
                f"- **Data Quality**: Analysis completed with limitations",
            ),
            _render_section(
                "Relationship analysis",
                lambda: render_relationship_insights(insights),
                "# Relationship Analysis\n\nBasic relationship analysis completed. "
                "Consider additional data exploration for detailed correlations.",
            ),
            _render_section(
                "Business questions",
                lambda: render_actionable_questions(insights),
                "# Key Business Questions\n\n## 1. What are the primary insights available in this dataset?\n\n"
                "## 2. How can this data support business decision-making?",
            ),
            _render_section(
                "Conclusion",
                lambda: render_conclusion(insights),
                "# Conclusion and Next Steps\n\nThis dataset provides a foundation for analytical insights.",
            ),
        ]
        report = "\n\n".join(section for section in sections if section.strip())
        if not report.strip():
            raise ReportGenerationError("Generated report is empty")
    except Exception as e:
        logger.warning(f"Report generation failed, using fallback report: {e}")
        return render_fallback_report(columns, insights)

    return report
