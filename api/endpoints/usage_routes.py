"""
api/endpoints/usage_routes.py — Usage statistics for the calling tenant.

GET /api/usage?timeframe=hour|day|month
"""

from datetime import timedelta
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.schemas import UsageResponse
from api.deps import require_client
from botengine.db.repository import get_client_usage_stats
from botengine.db.session import get_db
from botengine.security.auth import AuthContext

router = APIRouter()

TIMEFRAMES = {
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "month": timedelta(days=30),
}


@router.get("/usage", response_model=UsageResponse, summary="Usage statistics")
def usage(
    timeframe: Literal["hour", "day", "month"] = Query(default="hour"),
    auth: AuthContext = Depends(require_client("usage")),
    db: Session = Depends(get_db),
):
    """Request counts per endpoint and business events for the calling tenant."""
    stats = get_client_usage_stats(db, auth.client.client_id, TIMEFRAMES[timeframe])
    return {
        "success": True,
        "clientId": auth.client.client_id,
        "timeframe": timeframe,
        **stats,
        "quota": {
            "limit": auth.rate_limit.limit,
            "remaining": auth.rate_limit.remaining,
        },
    }
