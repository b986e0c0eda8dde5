"""
Account Service API Application Factory
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .accounts import router as accounts_router
from ..config import get_config
from ..logging_config import setup_logging, get_logger


logger = get_logger("account_service.api")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    setup_logging(level=config.log_level, log_format=config.log_format)

    app = FastAPI(
        title=f"{config.service_name} API",
        description=config.service_description,
        version=config.service_version,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed payloads are reported as 400, like ledger validation errors"""
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())}
        )

    app.include_router(accounts_router, prefix="/api/accounts", tags=["Accounts"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": config.service_name,
            "version": config.service_version
        }

    # Root endpoint
    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": f"{config.service_name} API",
            "version": config.service_version,
            "description": config.service_description,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "accounts": "/api/accounts",
                "transactions": "/api/accounts/transactions",
                "transfer": "/api/accounts/transfer",
                "statement": "/api/accounts/statement"
            }
        }

    return app


app = create_app()


def run_server(host: str = None, port: int = None, debug: bool = None):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "account_service.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=config.api_reload if debug is None else debug,
        log_level=config.log_level.lower()
    )
