from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field
from typing import Annotated, Literal, Optional, List, Any, Dict, Union

Role = Literal["user", "assistant"]
Intent = Literal["data_analysis", "definition", "translation", "general"]
Row = Dict[str, Any]

DEFAULT_SESSION_ID = "default"


class ConversationTurn(BaseModel):
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class ChartPoint(BaseModel):
    label: str
    value: float


class CategorySeries(BaseModel):
    type: Literal["bar"] = "bar"
    data: List[ChartPoint]


class TimeSeries(BaseModel):
    type: Literal["line"] = "line"
    data: List[ChartPoint]


class SingleMetric(BaseModel):
    type: Literal["metric"] = "metric"
    data: Dict[str, Any]


VisualizationEncoding = Annotated[
    Union[CategorySeries, TimeSeries, SingleMetric],
    Field(discriminator="type"),
]


class InteractionResult(BaseModel):
    text: str
    query: Optional[str] = None
    rows: Optional[List[Row]] = None
    chart: Optional[VisualizationEncoding] = None
    session_id: str = DEFAULT_SESSION_ID
    mode: Intent = "general"


class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("session_id", "sessionId")
    )
    max_rows: Optional[int] = Field(default=None, ge=0)  # cap on rows echoed back


class ChatResponse(BaseModel):
    success: bool = True
    mode: str
    text: str
    query_sql: Optional[str] = None
    rows: Optional[List[Row]] = None
    chart: Optional[VisualizationEncoding] = None
    chart_path: Optional[str] = None
    session_id: str


class HistoryResponse(BaseModel):
    session_id: str
    messages: List[ConversationTurn]
