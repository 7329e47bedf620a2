"""
Business insight generation.

Derives a likely industry domain, the columns that carry the most business
value, candidate relationships worth investigating, four actionable
questions and a short assessment of the dataset's analytical potential.
Everything is keyword and column-type driven; no values are inspected.
"""
import logging
from typing import Dict, List, Tuple

from analyst.core.errors import InsufficientDataError
from analyst.core.performance import track_performance
from analyst.core.schemas import BusinessInsights, ColumnInfo

logger = logging.getLogger(__name__)

GENERAL_DOMAIN = "General Business"
QUESTION_COUNT = 4
MAX_PRIMARY_COLUMNS = 3
MAX_CORRELATIONS = 6

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "Financial Services": [
        "price", "cost", "revenue", "profit", "expense", "budget", "amount", "balance", "payment",
        "transaction", "account", "investment", "portfolio", "stock", "bond", "interest", "loan",
        "credit", "debt",
    ],
    "E-commerce/Retail": [
        "product", "order", "customer", "purchase", "sale", "inventory", "quantity", "sku", "category",
        "brand", "rating", "review", "cart", "checkout", "shipping", "discount", "coupon",
    ],
    "Healthcare": [
        "patient", "diagnosis", "treatment", "medication", "doctor", "hospital", "clinic", "symptom",
        "disease", "health", "medical", "prescription", "therapy", "surgery", "vital", "blood", "heart",
    ],
    "Human Resources": [
        "employee", "salary", "department", "position", "hire", "performance", "manager", "team",
        "skill", "experience", "training", "benefit", "leave", "attendance", "promotion",
    ],
    "Marketing/Advertising": [
        "campaign", "click", "impression", "conversion", "lead", "engagement", "audience", "channel",
        "source", "medium", "bounce", "session", "pageview", "ctr", "cpc", "roi",
    ],
    "Operations/Manufacturing": [
        "production", "manufacturing", "quality", "defect", "batch", "process", "machine", "equipment",
        "efficiency", "downtime", "maintenance", "output", "capacity", "yield",
    ],
    "Education": [
        "student", "grade", "score", "course", "class", "teacher", "school", "university", "exam",
        "assignment", "semester", "gpa", "enrollment", "graduation",
    ],
    "Real Estate": [
        "property", "house", "apartment", "rent", "mortgage", "location", "address", "bedroom",
        "bathroom", "sqft", "area", "neighborhood", "listing", "agent",
    ],
}

HIGH_VALUE_KEYWORDS = ["revenue", "profit", "sales", "income", "amount", "value", "price", "cost", "total", "sum"]
MEDIUM_VALUE_KEYWORDS = ["quantity", "count", "number", "rate", "percentage", "score", "rating"]
LOW_VALUE_KEYWORDS = ["id", "name", "description", "type", "category", "status"]

FILLER_QUESTIONS = [
    "What are the key performance indicators that should be monitored in this dataset?",
    "What data quality improvements would enhance the analytical value of this dataset?",
    "What additional data sources could enhance the analytical insights from this dataset?",
    "Which factors drive the most significant outcomes in this dataset?",
]


def _split_by_type(columns: List[ColumnInfo]) -> Tuple[List[ColumnInfo], List[ColumnInfo], List[ColumnInfo]]:
    numerical = [c for c in columns if c.type == "numerical"]
    categorical = [c for c in columns if c.type == "categorical"]
    datetime_cols = [c for c in columns if c.type == "datetime"]
    return numerical, categorical, datetime_cols


def detect_industry_domain(columns: List[ColumnInfo]) -> str:
    """Best keyword match over column names, or a guess from the column type mix."""
    all_names = " ".join(c.name.lower() for c in columns)

    best_domain, best_weight = GENERAL_DOMAIN, 0
    for domain, keywords in INDUSTRY_KEYWORDS.items():
        weight = sum(1 for keyword in keywords if keyword in all_names)
        if weight > best_weight:
            best_domain, best_weight = domain, weight

    if best_weight > 0:
        return best_domain
    return _domain_from_column_types(columns)


def _domain_from_column_types(columns: List[ColumnInfo]) -> str:
    numerical, categorical, datetime_cols = _split_by_type(columns)
    total = len(columns)
    if not total:
        return GENERAL_DOMAIN

    if len(numerical) / total > 0.6:
        return "Financial Services" if datetime_cols else "Operations/Manufacturing"
    if len(categorical) / total > 0.5:
        return "E-commerce/Retail"
    if datetime_cols and numerical:
        return "Business Operations"
    return GENERAL_DOMAIN


def score_value_column(column: ColumnInfo) -> float:
    """Heuristic business-value score; only positive scores count as primary."""
    name = column.name.lower()
    score = 0.0

    if any(keyword in name for keyword in HIGH_VALUE_KEYWORDS):
        score += 10
    elif any(keyword in name for keyword in MEDIUM_VALUE_KEYWORDS):
        score += 5
    elif any(keyword in name for keyword in LOW_VALUE_KEYWORDS):
        score -= 8

    score += {"numerical": 8, "datetime": 3, "categorical": 2}.get(column.type, 0)

    if column.unique_values > 1:
        score += min(column.unique_values / 10, 5)
    elif column.unique_values == 0:
        score -= 10

    if column.has_nulls:
        score -= 5

    return score


def identify_primary_value_columns(columns: List[ColumnInfo]) -> List[str]:
    scored = [(score_value_column(c), c.name) for c in columns]
    positive = [item for item in scored if item[0] > 0]
    # sorted() is stable, so equal scores keep column order
    positive = sorted(positive, key=lambda item: item[0], reverse=True)
    return [name for _, name in positive[:MAX_PRIMARY_COLUMNS]]


def detect_potential_correlations(columns: List[ColumnInfo]) -> List[str]:
    numerical, categorical, datetime_cols = _split_by_type(columns)
    correlations = []

    for i, first in enumerate(numerical):
        for second in numerical[i + 1:]:
            correlations.append(f"Potential correlation between {first.name} and {second.name} (both numerical)")

    for cat_col in categorical:
        for num_col in numerical:
            correlations.append(f"{cat_col.name} may influence {num_col.name} (categorical vs numerical)")

    for date_col in datetime_cols:
        for num_col in numerical:
            correlations.append(f"{num_col.name} trends over {date_col.name} (time-series analysis)")

    for i, first in enumerate(categorical):
        for second in categorical[i + 1:]:
            correlations.append(f"Cross-tabulation between {first.name} and {second.name} (categorical grouping)")

    return correlations[:MAX_CORRELATIONS]


def _domain_questions(domain: str, primary: str) -> List[str]:
    if domain == "Financial Services":
        return [
            f"How can we optimize {primary} to improve overall financial performance?" if primary
            else "What are the key financial performance drivers in this dataset?",
            "What are the key risk factors and opportunities identified in this financial data?",
        ]
    if domain == "E-commerce/Retail":
        return [
            f"Which customer segments or product categories contribute most to {primary}?" if primary
            else "What are the key drivers of business performance in this retail dataset?",
            "What pricing or inventory strategies could improve business outcomes?",
        ]
    if domain == "Healthcare":
        return [
            "What patterns in patient data could improve treatment outcomes or operational efficiency?",
            f"How do different factors influence {primary} and what interventions are most effective?" if primary
            else "What are the most critical healthcare metrics to monitor in this dataset?",
        ]
    if domain == "Human Resources":
        return [
            "What factors contribute to employee performance and retention?",
            f"How can we optimize {primary} across different departments or roles?" if primary
            else "What are the key HR metrics that drive organizational success?",
        ]
    if domain == "Marketing/Advertising":
        return [
            "Which marketing channels and campaigns deliver the highest ROI?",
            f"What customer behaviors and characteristics drive {primary} performance?" if primary
            else "What are the most effective marketing strategies based on this data?",
        ]
    return [
        f"What are the primary drivers of {primary} in this business context?" if primary
        else "What are the key performance indicators in this business dataset?",
        "What operational improvements could be made based on these data insights?",
    ]


def generate_actionable_questions(columns: List[ColumnInfo], domain: str,
                                  primary_columns: List[str]) -> List[str]:
    """Exactly four questions: domain first, then structure-driven, then generic filler."""
    numerical, categorical, datetime_cols = _split_by_type(columns)
    primary = primary_columns[0] if primary_columns else ""
    questions = _domain_questions(domain, primary)

    if datetime_cols and numerical:
        value_col = primary or numerical[0].name
        questions.append(f"What are the seasonal trends and patterns in {value_col} over {datetime_cols[0].name}?")

    if categorical and numerical:
        value_col = primary or numerical[0].name
        questions.append(f"Which {categorical[0].name} categories drive the highest {value_col} performance?")

    if len(numerical) >= 2:
        questions.append(
            f"What is the relationship between {numerical[0].name} and {numerical[1].name}, "
            f"and how can this inform strategy?"
        )

    for filler in FILLER_QUESTIONS:
        if len(questions) >= QUESTION_COUNT:
            break
        if filler not in questions:
            questions.append(filler)

    return questions[:QUESTION_COUNT]


def assess_dataset_potential(columns: List[ColumnInfo], domain: str, primary_columns: List[str]) -> str:
    numerical, categorical, datetime_cols = _split_by_type(columns)
    parts = []

    if len(columns) >= 8:
        parts.append("This dataset shows high analytical potential with rich data dimensions.")
    elif len(columns) >= 4:
        parts.append("This dataset has moderate analytical potential with sufficient data variety.")
    else:
        parts.append("This dataset has basic analytical potential but may benefit from additional data sources.")

    capabilities = []
    if len(numerical) >= 2:
        capabilities += ["correlation analysis", "statistical modeling"]
    if categorical and numerical:
        capabilities += ["segmentation analysis", "comparative analysis"]
    if datetime_cols:
        capabilities += ["trend analysis", "forecasting"]
    if primary_columns:
        capabilities.append("performance optimization")
    if capabilities:
        parts.append(f"Key analytical capabilities include: {', '.join(capabilities)}.")

    parts.append(
        f"Within the {domain} context, this data could support strategic decision-making, "
        f"operational improvements and performance monitoring."
    )
    if not datetime_cols:
        parts.append("Adding temporal data would enhance trend analysis capabilities.")
    if len(numerical) < 2:
        parts.append("Additional quantitative metrics would improve analytical depth.")
    parts.append("Consider integrating with external data sources for comprehensive business intelligence.")

    return " ".join(parts)


def generate_fallback_insights(columns: List[ColumnInfo]) -> BusinessInsights:
    names = [c.name for c in columns]
    return BusinessInsights(
        industry_domain=GENERAL_DOMAIN,
        primary_value_columns=names[:MAX_PRIMARY_COLUMNS],
        potential_correlations=(
            [f"Basic relationship analysis between {names[0]} and other columns"] if len(names) >= 2
            else ["Limited correlation analysis due to insufficient columns"]
        ),
        actionable_questions=[
            "What are the main characteristics of this dataset?",
            "How can this data support business decision-making?",
            "What data quality improvements would enhance analysis?",
            "What additional context would improve insights?",
        ],
        dataset_potential=(
            f"This dataset contains {len(columns)} columns with basic analytical potential. "
            "Consider data enrichment and quality improvements for enhanced analysis."
        ),
    )


@track_performance("generate_business_insights")
def generate_business_insights(columns: List[ColumnInfo]) -> BusinessInsights:
    """
    Business insights for a classified column list.

    Raises InsufficientDataError when no column holds data. Any other
    failure is logged and answered with generic fallback insights.
    """
    if not columns:
        raise InsufficientDataError("No columns available for business analysis")
    if not any(c.unique_values > 0 for c in columns):
        raise InsufficientDataError("No columns contain sufficient data for business analysis")

    try:
        domain = detect_industry_domain(columns)
        primary = identify_primary_value_columns(columns)
        insights = BusinessInsights(
            industry_domain=domain,
            primary_value_columns=primary,
            potential_correlations=detect_potential_correlations(columns),
            actionable_questions=generate_actionable_questions(columns, domain, primary),
            dataset_potential=assess_dataset_potential(columns, domain, primary),
        )
    except Exception as e:
        logger.warning(f"Business analysis failed, using fallback insights: {e}")
        return generate_fallback_insights(columns)

    logger.info(f"Business insights generated for domain '{insights.industry_domain}'")
    return insights
