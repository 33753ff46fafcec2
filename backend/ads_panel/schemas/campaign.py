from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

class CampaignStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"
    IN_PROCESS = "IN_PROCESS"

class CampaignInsights(BaseModel):
    spend: str = "0.00"
    impressions: str = "0"
    reach: str = "0"
    cpm: str = "0.00"
    cost_per_conversation: str = "0.00"
    conversation_count: int = 0
    roas: str = "0.00"

class CampaignRecord(BaseModel):
    id: str
    name: str = ""
    status: str = ""  # vendor value, usually a CampaignStatus
    objective: Optional[str] = None
    account_name: str = ""
    insights: CampaignInsights = Field(default_factory=CampaignInsights)

class DashboardRow(CampaignRecord):
    cost_indicator: Optional[str] = None

class Period(BaseModel):
    since: Optional[str] = None
    until: Optional[str] = None

class DashboardFilters(BaseModel):
    account: str = "all"
    search: str = ""
    status: str = "all"
    objective: str = "all"

class FilterOptions(BaseModel):
    accounts: List[str] = []
    statuses: List[str] = []
    objectives: List[str] = []

class DashboardSummary(BaseModel):
    campaign_count: int = 0
    total_spend: float = 0.0
    total_impressions: int = 0
    total_conversations: int = 0
    average_cpm: float = 0.0
    average_cost_per_conversation: float = 0.0
    cost_indicator: Optional[str] = None

class ChartSeries(BaseModel):
    labels: List[str] = []
    values: List[float] = []

class DashboardCharts(BaseModel):
    top_spend: ChartSeries = Field(default_factory=ChartSeries)
    spend_by_account: ChartSeries = Field(default_factory=ChartSeries)
    top_cpm: ChartSeries = Field(default_factory=ChartSeries)

class DashboardResponse(BaseModel):
    period: Period
    filters: DashboardFilters
    options: FilterOptions
    campaigns: List[DashboardRow]
    summary: DashboardSummary
    charts: DashboardCharts
