"""
DataLaser Engine — FastAPI Server (Port 8002)
================================================
Tabular-data analysis service: semantic column type inference, descriptive
statistics, correlations, cross-tabs, group-by aggregation, automated
insights, and a tool surface for a conversational analyst.

Run:
  uvicorn main:app --host 0.0.0.0 --port 8002 --reload
  # or
  python main.py
"""

import logging
from contextlib import asynccontextmanager

# Load .env file BEFORE anything reads os.getenv()
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from datalaser import __version__  # noqa: E402
from datalaser.config import settings  # noqa: E402

# ── Logging ──
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("datalaser")


# ── Lifespan: warm up ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS
    from datalaser.core.analysis.tools import TOOL_DEFINITIONS

    logger.info(
        f"DataLaser Engine ready: {len(TOOL_DEFINITIONS)} analyst tools, "
        f"type detection sample size {DEFAULT_THRESHOLDS.type_detection_sample_size}"
    )
    yield
    logger.info("Shutting down DataLaser Engine")


# ── Create FastAPI app ──
app = FastAPI(
    title="DataLaser Engine",
    description=(
        "Tabular-data analysis: column type inference (numeric, categorical, date, "
        "percentage, Likert-scale, demographic, text), descriptive statistics, "
        "correlations, cross-tabulation, group-by aggregation, automated insights "
        "and analyst tools."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Mount all API routes ──
from datalaser.api.router import api_router  # noqa: E402
app.include_router(api_router, prefix="/api/v1")


# ── Root ──
@app.get("/", tags=["Root"])
async def root():
    return {
        "service": "DataLaser Engine",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "analysis": "/api/v1/analysis/ (11 endpoints)",
        },
        "health": "/api/v1/analysis/health",
    }


# ── Direct run ──
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
