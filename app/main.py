"""GSC Connector — FastAPI Application Entry Point.

Exposes Search Console site listing, page-performance queries, period
comparisons and URL inspection as HTTP operations.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.gsc_routes import router as gsc_router
from app.config import settings
from app.connectors.gsc.client import SCOPES
from app.core.logging import get_logger

logger = get_logger("main")

app = FastAPI(
    title="GSC Connector",
    description="Search Console operations: sites, paginated search analytics, period comparison, URL inspection.",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(gsc_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "gsc-connector",
        "version": "1.0.0",
        "token_configured": bool(settings.gsc_access_token),
        "required_scopes": list(SCOPES),
    }
