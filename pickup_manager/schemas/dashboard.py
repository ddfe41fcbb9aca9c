"""
Dashboard schema models.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class Kpis(BaseModel):
    total_requests: int = 0
    pending_requests: int = 0
    completed_requests: int = 0
    total_containers: int = 0
    total_cost: float = 0.0
    containers_in_stock: int = 0


class NamedCount(BaseModel):
    name: str
    value: float


class TimelinePoint(BaseModel):
    date: str
    count: int


class InsightType(str, Enum):
    PREDICTION = "prediction"
    ANOMALY = "anomaly"


class InsightSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Insight(BaseModel):
    type: InsightType
    title: str
    description: str
    severity: InsightSeverity
    location: Optional[str] = None


class DashboardData(BaseModel):
    """Everything the dashboard screen shows"""
    kpis: Kpis
    top_locations: List[NamedCount]
    top_container_types: List[NamedCount]
    timeline: List[TimelinePoint]
    costs_by_location: List[NamedCount]
    insights: List[Insight]
