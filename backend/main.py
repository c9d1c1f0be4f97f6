from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging
import uvicorn

from config import API_VERSION, Settings, load_settings
from models.spreadsheet import ErrorResponse
from routes.spreadsheet import router as spreadsheet_router
from routes.rows import router as rows_router
from routes.health import router as health_router
from services.exceptions import SheetsServiceError
from services.gateway import SheetsGateway
from services.google_sheets_gateway import GoogleSheetsGateway, load_credentials
from services.memory_gateway import InMemorySheetsGateway
from services.spreadsheet_service import SpreadsheetService

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    # gspread/google-auth request logging is noisy at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


def build_gateway(settings: Settings) -> SheetsGateway:
    """Pick the spreadsheet backend; falls back to memory when Google isn't configured"""
    if settings.sheets_backend == "memory":
        logger.info("Using in-memory spreadsheet backend")
        return InMemorySheetsGateway()

    credentials = load_credentials(settings.google_credentials_json, settings.google_credentials_file)
    if credentials is None:
        logger.error("Google Sheets credentials not found - using in-memory spreadsheet backend")
        return InMemorySheetsGateway()

    return GoogleSheetsGateway(credentials)


def create_app(settings: Optional[Settings] = None, gateway: Optional[SheetsGateway] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Sheets DB API",
        description="REST API exposing Google Sheets as a row store",
        version=API_VERSION
    )
    app.state.settings = settings
    app.state.spreadsheet_service = SpreadsheetService(gateway or build_gateway(settings))

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(spreadsheet_router, prefix="/sheets", tags=["sheets"], responses=ERROR_RESPONSES)
    app.include_router(rows_router, prefix="/sheets/{sheet_name}/rows", tags=["rows"], responses=ERROR_RESPONSES)
    app.include_router(health_router, prefix="/health", tags=["health"])

    # Every error leaves the API as {"error": message}
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(SheetsServiceError)
    async def service_error_handler(request: Request, exc: SheetsServiceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} failed unexpectedly")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=app.state.settings.port, reload=True)
