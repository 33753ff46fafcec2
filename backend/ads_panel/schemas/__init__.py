from .campaign import (
    CampaignInsights,
    CampaignRecord,
    CampaignStatus,
    ChartSeries,
    DashboardCharts,
    DashboardFilters,
    DashboardResponse,
    DashboardRow,
    DashboardSummary,
    FilterOptions,
    Period,
)
