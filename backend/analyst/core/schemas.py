from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Dict, Literal

ColumnType = Literal["numerical", "categorical", "datetime", "text"]
ChartType = Literal["bar", "line", "scatter"]


class FrozenModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ColumnInfo(FrozenModel):
    name: str
    type: ColumnType
    unique_values: int = Field(default=0, ge=0, alias="uniqueValues")
    has_nulls: bool = Field(default=False, alias="hasNulls")
    sample_values: List[Any] = Field(default_factory=list, max_length=5, alias="sampleValues")


class ChartRecommendation(FrozenModel):
    title: str = Field(min_length=1)
    type: ChartType
    x_axis: str = Field(alias="xAxis")
    y_axis: str = Field(alias="yAxis")


class RunStatistics(FrozenModel):
    total_charts: int = Field(default=0, ge=0, alias="totalCharts")
    aspect_coverage: Dict[str, int] = Field(default_factory=dict, alias="aspectCoverage")
    unique_column_combinations: int = Field(default=0, ge=0, alias="uniqueColumnCombinations")
    diversity_score: float = Field(default=0.0, ge=0.0, le=1.0, alias="diversityScore")


class ColumnStatistics(FrozenModel):
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    mode: Optional[Any] = None
    null_count: int = Field(default=0, ge=0, alias="nullCount")
    unique_count: int = Field(default=0, ge=0, alias="uniqueCount")


class DataQualityMetrics(FrozenModel):
    completeness: float = Field(ge=0.0, le=1.0)
    consistency: float = Field(ge=0.0, le=1.0)
    issues: List[str] = Field(default_factory=list)


class ProcessedInput(FrozenModel):
    columns: List[ColumnInfo]
    data_quality: DataQualityMetrics = Field(alias="dataQuality")


class BusinessInsights(FrozenModel):
    industry_domain: str = Field(alias="industryDomain")
    primary_value_columns: List[str] = Field(default_factory=list, max_length=3, alias="primaryValueColumns")
    potential_correlations: List[str] = Field(default_factory=list, max_length=6, alias="potentialCorrelations")
    actionable_questions: List[str] = Field(default_factory=list, alias="actionableQuestions")
    dataset_potential: str = Field(default="", alias="datasetPotential")


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    headers: List[Any]
    sample_data: List[Any] = Field(alias="sampleData")


class AnalysisOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    charts_to_generate: List[ChartRecommendation]
    full_analysis_report_markdown: str


class ChartsRequest(BaseModel):
    columns: List[ColumnInfo]


class ChartsResponse(BaseModel):
    charts: List[ChartRecommendation]
    statistics: RunStatistics


class AnalysisMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    processing_time_ms: float = Field(alias="processingTime")
    chart_count: int = Field(alias="chartCount")
    report_length: int = Field(alias="reportLength")
    row_count: int = Field(alias="rowCount")
    column_count: int = Field(alias="columnCount")
    correlation_id: Optional[str] = Field(default=None, alias="correlationId")


class AnalysisResponse(BaseModel):
    success: bool = True
    data: AnalysisOutput
    metadata: AnalysisMetadata
