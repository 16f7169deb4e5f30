"""
FastAPI router module for Placement Analytics endpoints.

This module exposes the analytics engine over HTTP. The caller posts the
placement feed it already fetched (and cached) from the placement metrics
endpoint together with its scope parameters; the engine recomputes every
derived view and returns a single PlacementAnalytics object.

Key Endpoints:
- POST /analytics/placements: Run the pipeline over a posted feed
- GET /analytics/policy: Effective policy for a dashboard variant
- GET /analytics/states: Canonical state enumeration with regions

Design Requirements:
- The engine performs no I/O; the endpoint only reads the request body
- Malformed feed items never fail the request
- Invalid scope values fail request validation (HTTP 422)
"""

import logging
from datetime import datetime
from typing import Dict, List

from fastapi import APIRouter, HTTPException, Query

from backend.core.config import build_policy
from backend.core.dependencies import SettingsDep
from backend.models.enums import DashboardVariant
from backend.models.schemas import (
    AnalyticsPolicy,
    PlacementAnalytics,
    PlacementAnalyticsRequest,
)
from backend.services.calendar_utils import ensure_aware
from backend.services.placement_analytics import analyze_placement_payload
from backend.services.regions import region_for_state
from backend.services.states import ALL_STATE_NAMES, state_abbreviation


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    responses={
        422: {"description": "Validation error in request"},
        500: {"description": "Internal server error during processing"},
    },
)


# =============================================================================
# POST /analytics/placements - Compute dashboard analytics
# =============================================================================


@router.post("/placements", response_model=PlacementAnalytics)
def compute_placement_analytics(
    request: PlacementAnalyticsRequest,
    settings: SettingsDep,
) -> PlacementAnalytics:
    """
    Compute every derived placement view for the posted feed and scope.

    The policy is built from settings for the requested dashboard variant.
    When `now` is omitted the current time in the policy timezone is used;
    pass it explicitly for reproducible output.

    Args:
        request: Feed items, scope, dashboard variant and optional `now`.
        settings: Injected application settings.

    Returns:
        PlacementAnalytics result object.

    Raises:
        HTTPException 500: If the policy cannot be built or the engine fails.
    """
    try:
        policy = build_policy(settings, request.dashboard)
        now = ensure_aware(request.now, policy.tz) if request.now else datetime.now(policy.tz)

        return analyze_placement_payload(request.records, request.scope, now, policy)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error computing placement analytics")
        raise HTTPException(
            status_code=500,
            detail=f"Error computing placement analytics: {str(e)}",
        )


# =============================================================================
# GET /analytics/policy - Effective policy
# =============================================================================


@router.get("/policy", response_model=AnalyticsPolicy)
async def get_effective_policy(
    settings: SettingsDep,
    dashboard: DashboardVariant = Query(default=DashboardVariant.DASHBOARD),
) -> AnalyticsPolicy:
    """Policy record the engine applies for a dashboard variant."""
    return build_policy(settings, dashboard)


# =============================================================================
# GET /analytics/states - Canonical state enumeration
# =============================================================================


@router.get("/states")
async def list_states() -> List[Dict[str, str]]:
    """
    Canonical states with postal abbreviation and region.

    Used by the dashboards to render filter chips and coverage legends.
    """
    return [
        {
            "state": state,
            "abbreviation": state_abbreviation(state) or "",
            "region": region_for_state(state).value,
        }
        for state in ALL_STATE_NAMES
    ]
