"""
Health Router - Health checks and configuration status
"""

from fastapi import APIRouter, Depends
from typing import Dict, Any

from api.dependencies import get_app_state, AppState

router = APIRouter()


@router.get("")
async def health(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """
    Liveness plus configuration status.

    `ok` is False while the TMDB credential is missing, so a deploy without
    the key is visible without calling an upstream route.
    """
    status = state.get_status()
    return {
        "ok": status["tmdb_configured"],
        "environment": state.settings.env,
        "details": status,
    }
