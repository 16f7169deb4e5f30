"""
Pydantic request/response models for the Placement Analytics backend.

This module provides type-safe data validation and serialization for the
analytics engine: the normalized placement record, the scope and policy
records that parameterize a run, every derived aggregate row, the KPI set,
and the single immutable result object returned to dashboards.

Source references:
- Placement metrics feed: PlacementRecord
- General dashboard: StateTotalRow, StateGrowthRow, StateParetoRow,
  SeasonalityCell, RecencyRow, StateOpportunityRow
- Manager rollup: TrendPoint, RegionTotalRow, CityHotspotRow,
  RegionCoverageRow, StaleStateRow, UntappedStateRow
- Both dashboards: KPISet, PlacementAnalytics

All models use Pydantic v2 syntax. Derived rows are frozen so that consumers
cannot mutate a computed view in place.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backend.models.enums import (
    DashboardVariant,
    DataHealth,
    DateRange,
    RecencyRiskBand,
    RegionName,
    SeriesGranularity,
    StalenessPolicy,
    Weekday,
)


# =============================================================================
# Input Record
# =============================================================================


class PlacementRecord(BaseModel):
    """
    A single normalized placement event.

    Built by the record normalizer from an arbitrary decoded feed item.
    `state` is always a canonical state name or "Unknown"; `placementDate`
    is None when the source text could not be parsed, in which case
    `placementTimestamp` is 0 and `placementDateRaw` keeps the source text.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "appId": 1042,
                "city": "Austin",
                "state": "Texas",
                "placementDate": "2026-09-14T00:00:00Z",
                "placementTimestamp": 1789344000000,
                "placementDateRaw": "2026-09-14",
            }
        }
    )

    appId: int = Field(..., description="Opaque identifier (falls back to the item index)")
    city: str = Field(default="", description="Free-form city text")
    state: str = Field(default="Unknown", description="Canonical state name or 'Unknown'")
    placementDate: Optional[datetime] = Field(
        default=None,
        description="Parsed placement instant in the configured calendar timezone"
    )
    placementTimestamp: int = Field(
        default=0,
        description="Epoch milliseconds of placementDate; 0 when absent"
    )
    placementDateRaw: str = Field(default="", description="Original trimmed date text")

    @property
    def is_dated(self) -> bool:
        return self.placementDate is not None


# =============================================================================
# Scope and Policy
# =============================================================================


class AnalyticsScope(BaseModel):
    """
    Scope parameters supplied by the dashboard on every recomputation.

    `includeUnknownStates` overrides the policy default when set; leaving it
    unset defers to the active policy preset.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "dateRange": "90d",
                "granularity": "weekly",
                "selectedState": "TX",
                "includeUnknownStates": False,
            }
        }
    )

    dateRange: DateRange = Field(default=DateRange.ALL, description="Date window")
    granularity: SeriesGranularity = Field(
        default=SeriesGranularity.DAILY,
        description="Trend series bucket width"
    )
    selectedState: Optional[str] = Field(
        default=None,
        description="Optional single-state drill filter (name or abbreviation)"
    )
    includeUnknownStates: Optional[bool] = Field(
        default=None,
        description="Keep records whose state resolved to 'Unknown'"
    )

    @field_validator("selectedState")
    @classmethod
    def _canonical_state(cls, value: Optional[str]) -> Optional[str]:
        """Resolve the drill filter to a canonical state name; reject unrecognised text."""
        # Imported here: backend.services imports this module
        from backend.services.states import UNKNOWN_STATE, normalize_state

        if not value:
            return None
        state = normalize_state(value)
        if state == UNKNOWN_STATE and value.lower() != UNKNOWN_STATE.lower():
            raise ValueError(f"Unknown state: {value}")
        return state


class RiskBandThresholds(BaseModel):
    """Upper bounds (inclusive, in days) of the Healthy and Watch bands."""
    model_config = ConfigDict(frozen=True)

    healthyMaxDays: int = Field(default=14, ge=0)
    watchMaxDays: int = Field(default=30, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "RiskBandThresholds":
        if self.watchMaxDays < self.healthyMaxDays:
            raise ValueError("watchMaxDays must be >= healthyMaxDays")
        return self


class TopNLimits(BaseModel):
    """Row caps for every ranked view."""
    model_config = ConfigDict(frozen=True)

    pareto: int = Field(default=12, ge=1)
    seasonalityStates: int = Field(default=15, ge=1)
    momentumStates: int = Field(default=5, ge=1)
    momentumWeeks: int = Field(default=16, ge=1)
    recencyRows: int = Field(default=15, ge=1)
    cityDrilldown: int = Field(default=10, ge=1)
    regionStates: int = Field(default=12, ge=1)
    stateOpportunity: int = Field(default=16, ge=1)
    recentRecords: int = Field(default=18, ge=0)
    topCities: Optional[int] = Field(default=None, ge=1)


class AnalyticsPolicy(BaseModel):
    """
    Explicit policy record consolidating both dashboards' rules.

    The general dashboard and the manager rollup differ only in the values
    held here: banding thresholds, staleness threshold, Unknown-state
    handling, which staleness rule drives the KPI, and row caps.

    Attributes:
        riskBandThresholds: Healthy/Watch band bounds in days.
        staleDaysThreshold: Days since last activity at which a state is stale.
        noActivitySentinelDays: Days reported for states without a dated record.
        includeUnknownStates: Default for AnalyticsScope.includeUnknownStates.
        kpiStalenessPolicy: Rule feeding KPISet.staleStateCount.
        topNLimits: Row caps for ranked views.
        calendarTimezone: IANA zone used for all calendar bucketing.
    """
    model_config = ConfigDict(frozen=True)

    riskBandThresholds: RiskBandThresholds = Field(default_factory=RiskBandThresholds)
    staleDaysThreshold: int = Field(default=90, ge=1)
    noActivitySentinelDays: int = Field(default=9999, ge=1)
    includeUnknownStates: bool = Field(default=True)
    kpiStalenessPolicy: StalenessPolicy = Field(default=StalenessPolicy.RISK_LADDER)
    topNLimits: TopNLimits = Field(default_factory=TopNLimits)
    calendarTimezone: str = Field(default="UTC")

    @field_validator("calendarTimezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.calendarTimezone)


# =============================================================================
# Derived Aggregate Rows
# =============================================================================


class StateTotalRow(BaseModel):
    """Per-state placement count and share of the scoped total."""
    model_config = ConfigDict(frozen=True)

    state: str
    placements: int = Field(..., ge=0)
    share: float = Field(..., ge=0.0, le=100.0, description="Percent, one decimal")


class StatePaceRow(BaseModel):
    """Trailing-30-day placement count for a state."""
    model_config = ConfigDict(frozen=True)

    state: str
    placements30d: int = Field(..., ge=0)


class StateGrowthRow(BaseModel):
    """
    Trailing 30 days versus the prior 30 days for a state.

    growthPct is clamped to [-100, 300]; a state with no prior activity but
    recent activity reports 100, and a state with neither reports 0.
    """
    model_config = ConfigDict(frozen=True)

    state: str
    recentPlacements: int = Field(..., ge=0)
    priorPlacements: int = Field(..., ge=0)
    growthPct: float = Field(..., ge=-100.0, le=300.0)
    growthDelta: int
    totalPlacements: int = Field(..., ge=0)


class StateWeeklyRow(BaseModel):
    """One week of the top-state momentum chart; `counts` is keyed by state."""
    model_config = ConfigDict(frozen=True)

    weekKey: str = Field(..., description="Monday date as YYYY-MM-DD")
    weekLabel: str
    counts: Dict[str, int] = Field(default_factory=dict)


class StateParetoRow(BaseModel):
    """Concentration ranking row with running cumulative share."""
    model_config = ConfigDict(frozen=True)

    state: str
    placements: int = Field(..., ge=0)
    share: float
    cumulativeShare: float


class SeasonalityCell(BaseModel):
    """One state x month cell of the seasonality heatmap."""
    model_config = ConfigDict(frozen=True)

    state: str
    stateIndex: int = Field(..., ge=0)
    monthLabel: str
    monthIndex: int = Field(..., ge=0, le=11)
    placements: int = Field(..., ge=0)
    intensity: float = Field(..., ge=0.0, le=1.0)


class RecencyRow(BaseModel):
    """Days since last placement and the resulting risk band for a state."""
    model_config = ConfigDict(frozen=True)

    state: str
    daysSinceLastPlacement: int = Field(..., ge=0)
    riskBand: RecencyRiskBand
    totalPlacements: int = Field(..., ge=0)
    lastPlacementLabel: str


class StaleStateRow(BaseModel):
    """A state at or beyond the stale-days threshold."""
    model_config = ConfigDict(frozen=True)

    state: str
    region: RegionName
    totalPlacements: int = Field(..., ge=0)
    daysSinceLastPlacement: int = Field(..., ge=0)
    lastPlacementLabel: str


class TrendPoint(BaseModel):
    """One gap-filled period of the placement trend series."""
    model_config = ConfigDict(frozen=True)

    periodKey: str
    periodLabel: str
    placements: int = Field(..., ge=0)


class MonthlyTrendPoint(BaseModel):
    """Calendar-month count with a trailing moving average."""
    model_config = ConfigDict(frozen=True)

    monthKey: str = Field(..., description="YYYY-MM")
    monthLabel: str
    placements: int = Field(..., ge=0)
    movingAverage: float = Field(..., ge=0.0)


class WeekdayPulseRow(BaseModel):
    """Placements falling on a given weekday."""
    model_config = ConfigDict(frozen=True)

    day: Weekday
    placements: int = Field(..., ge=0)


class RegionTotalRow(BaseModel):
    """Per-region placement count and share."""
    model_config = ConfigDict(frozen=True)

    region: RegionName
    placements: int = Field(..., ge=0)
    share: float


class CityHotspotRow(BaseModel):
    """Per-(city, state) placement count and share."""
    model_config = ConfigDict(frozen=True)

    city: str
    state: str
    region: RegionName
    label: str = Field(..., description="'City, State'")
    placements: int = Field(..., ge=0)
    share: float


class CityCountRow(BaseModel):
    """City drilldown row for a selected state."""
    model_config = ConfigDict(frozen=True)

    city: str
    placements: int = Field(..., ge=0)


class CoverageStateRow(BaseModel):
    """A state's scoped count within a coverage region (possibly 0)."""
    model_config = ConfigDict(frozen=True)

    state: str
    placements: int = Field(..., ge=0)


class RegionCoverageRow(BaseModel):
    """Region rollup including zero-activity states, capped with a truncation flag."""
    model_config = ConfigDict(frozen=True)

    region: RegionName
    totalPlacements: int = Field(..., ge=0)
    states: List[CoverageStateRow] = Field(default_factory=list)
    truncated: bool = Field(default=False, description="True when states were capped")


class UntappedStateRow(BaseModel):
    """A state of the full enumeration with zero scoped placements."""
    model_config = ConfigDict(frozen=True)

    state: str
    region: RegionName
    placements: int = Field(default=0, ge=0, le=0)


class StateOpportunityRow(BaseModel):
    """Per-state spread, freshness and density over the range-filtered set."""
    model_config = ConfigDict(frozen=True)

    state: str
    placements: int = Field(..., ge=0)
    citySpread: int = Field(..., ge=0)
    freshnessDays: int = Field(..., ge=0)
    density: float = Field(..., ge=0.0)


# =============================================================================
# KPI Set and Result Object
# =============================================================================


class KPISet(BaseModel):
    """
    Scalar headline metrics drawn from the derived views.

    Data-quality counters (`invalidDateRecords`, `unknownStateRecords`) are
    measured over the full normalized input, independent of scope.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "scopedPlacements": 2,
                "activeStates": 2,
                "activeRegions": 2,
                "topState": "Texas",
                "topStateShare": 50.0,
                "topCity": "Austin, Texas",
                "medianPlacementsPerState": 1.0,
                "staleStateCount": 0,
                "untappedStatesCount": 49,
                "placementsLast7d": 2,
                "placementsThisMonth": 2,
                "avgPlacementsPerDay": 0.07,
                "latestPlacementDate": "2026-10-13T00:00:00Z",
                "latestPlacementRaw": "2026-10-13",
                "invalidDateRecords": 0,
                "unknownStateRecords": 0,
                "dataHealth": "OK",
            }
        }
    )

    scopedPlacements: int = Field(..., ge=0)
    activeStates: int = Field(..., ge=0)
    activeRegions: int = Field(..., ge=0)
    topState: Optional[str] = None
    topStateShare: float = 0.0
    topCity: Optional[str] = None
    medianPlacementsPerState: float = 0.0
    staleStateCount: int = Field(default=0, ge=0)
    untappedStatesCount: int = Field(default=0, ge=0)
    placementsLast7d: int = Field(default=0, ge=0)
    placementsThisMonth: int = Field(default=0, ge=0)
    avgPlacementsPerDay: float = 0.0
    latestPlacementDate: Optional[datetime] = None
    latestPlacementRaw: str = ""
    invalidDateRecords: int = Field(default=0, ge=0)
    unknownStateRecords: int = Field(default=0, ge=0)
    dataHealth: DataHealth = DataHealth.OK


class PlacementAnalytics(BaseModel):
    """
    Immutable result of one analytics pipeline run.

    Every view is recomputed wholesale from (records, scope, policy, now);
    rendering layers consume it read-only.
    """
    model_config = ConfigDict(frozen=True)

    generatedAt: datetime
    scope: AnalyticsScope
    selectedState: Optional[str] = Field(
        default=None,
        description="Canonical form of scope.selectedState"
    )
    scopedRecordCount: int = Field(..., ge=0)

    stateTotals: List[StateTotalRow] = Field(default_factory=list)
    statePace: List[StatePaceRow] = Field(default_factory=list)
    stateGrowth30d: List[StateGrowthRow] = Field(default_factory=list)
    stateWeeklySeries16w: List[StateWeeklyRow] = Field(default_factory=list)
    weeklySeriesStates: List[str] = Field(default_factory=list)
    statePareto: List[StateParetoRow] = Field(default_factory=list)
    stateSeasonality12m: List[SeasonalityCell] = Field(default_factory=list)
    stateSeasonalityStates: List[str] = Field(default_factory=list)
    stateSeasonalityMonths: List[str] = Field(default_factory=list)
    stateRecencyRisk: List[RecencyRow] = Field(default_factory=list)
    staleStates: List[StaleStateRow] = Field(default_factory=list)
    stateOpportunity: List[StateOpportunityRow] = Field(default_factory=list)

    trend: List[TrendPoint] = Field(default_factory=list)
    monthlyTrend: List[MonthlyTrendPoint] = Field(default_factory=list)
    weekdayPulse: List[WeekdayPulseRow] = Field(default_factory=list)
    peakWeekday: Optional[Weekday] = None

    regionTotals: List[RegionTotalRow] = Field(default_factory=list)
    topCities: List[CityHotspotRow] = Field(default_factory=list)
    cityDrilldown: List[CityCountRow] = Field(default_factory=list)
    coverage: List[RegionCoverageRow] = Field(default_factory=list)
    untappedStates: List[UntappedStateRow] = Field(default_factory=list)

    recentPlacements: List[PlacementRecord] = Field(default_factory=list)
    kpis: KPISet


# =============================================================================
# API Request Models
# =============================================================================


class PlacementAnalyticsRequest(BaseModel):
    """
    Request body for POST /analytics/placements.

    `records` is the undeserialized placement feed exactly as delivered by
    the placement metrics endpoint; malformed items are tolerated.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "records": [
                    {"app_id": 1, "city": "Austin", "state": "TX", "placementDate": "2026-10-13"},
                    {"app_id": 2, "city": "Fresno", "state": "ca", "placementDate": "10/13/2026"},
                ],
                "scope": {"dateRange": "30d", "granularity": "daily"},
                "dashboard": "dashboard",
            }
        }
    )

    records: List[Any] = Field(default_factory=list, description="Raw placement feed items")
    scope: AnalyticsScope = Field(default_factory=AnalyticsScope)
    dashboard: DashboardVariant = Field(default=DashboardVariant.DASHBOARD)
    now: Optional[datetime] = Field(
        default=None,
        description="Reference instant; defaults to the current time"
    )
