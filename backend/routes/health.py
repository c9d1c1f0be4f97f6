from fastapi import APIRouter, Request
from datetime import datetime

from config import API_VERSION
from models.spreadsheet import HealthResponse

router = APIRouter()

@router.get("", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "version": API_VERSION,
        "environment": request.app.state.settings.environment
    }

@router.get("/status")
async def detailed_status(request: Request):
    """Detailed system status"""
    gateway = request.app.state.spreadsheet_service.gateway
    return {
        "api": "running",
        "backend": gateway.name,
        "google_sheets": "configured" if gateway.name == "google_sheets" else "not_configured",
        "timestamp": datetime.now().isoformat()
    }
