"""
API Router — Combines all endpoint groups.

Analysis (11 endpoints): /api/v1/analysis/{detect-types,stats,correlations,cross-tab,group-by,
                         insights,summary,chart-series,tools,tools/execute,health}
"""

from fastapi import APIRouter

from datalaser.api.v1.analysis import router as analysis_router

api_router = APIRouter()

api_router.include_router(
    analysis_router,
    prefix="/analysis",
    tags=["DataLaser Analysis"],
)
