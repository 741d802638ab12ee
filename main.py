import logging
import subprocess
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import click
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.core.config import settings
from relay.core.credentials import default_providers, resolve_credentials
from relay.core.exceptions import CredentialError, GatewayError, ServiceException
from relay.core.limiter import custom_rate_limit_exceeded_handler, limiter
from relay.core.services import Services, build_services
from relay.routers import routes

# ============================================================================
# Directory Setup
# ============================================================================
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / settings.log_dir

LOGS_DIR.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Logging Configuration
# ============================================================================
def resolve_log_level(settings) -> int:
    """DEBUG wins; otherwise LOG_LEVEL by name, falling back to INFO."""
    if settings.debug:
        return logging.DEBUG
    level = getattr(logging, settings.log_level.upper(), None)
    return level if isinstance(level, int) else logging.INFO


def setup_logging():
    """Configure logging for the application."""
    log_level = resolve_log_level(settings)
    log_format = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s"

    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(
            LOGS_DIR / "app.log",
            mode="a",
            encoding="utf-8",
        ),
    ]

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    # Suppress verbose third-party logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logging.getLogger(__name__)


logger = setup_logging()


# ============================================================================
# Application Lifespan
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared service clients on startup and release them on shutdown."""
    logger.info("=" * 80)
    logger.info("Starting application...")
    logger.info("=" * 80)

    owns_services = app.state.services is None
    if owns_services:
        try:
            app.state.services = build_services(settings)
        except CredentialError as e:
            logger.critical(f"✗ Cannot start without Firebase credentials: {e}")
            raise
        except Exception as e:
            logger.error(f"✗ Failed during startup: {e}", exc_info=True)
            raise

    logger.info(f"Allowed origins: {settings.allowed_origins}")
    if settings.is_development:
        logger.info("Development mode: all CORS origins allowed")
    if not app.state.services.settings.flw_secret_hash:
        logger.warning("FLW_SECRET_HASH is not set; every webhook will be rejected")
    logger.info("✓ Application startup completed successfully")

    yield  # Application is running

    logger.info("Shutting down application...")
    if owns_services:
        await app.state.services.aclose()
        app.state.services = None
    logger.info("✓ Application shutdown completed")


# ============================================================================
# Exception Handlers
# ============================================================================
async def service_exception_handler(request: Request, exc: ServiceException):
    logger.error(f"Service exception: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": exc.type},
    )


async def gateway_exception_handler(request: Request, exc: GatewayError):
    logger.error(f"Gateway exception: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"error": exc.payload if exc.payload is not None else exc.message},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    # Serialize errors to make them JSON serializable
    details = []
    for error in exc.errors():
        details.append(
            {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": error.get("type"),
            }
        )
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": details},
    )


# ============================================================================
# FastAPI Application
# ============================================================================
def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create the ASGI application.

    Passing ``services`` skips client construction in the lifespan, which is
    how tests inject fakes.
    """
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.services = services

    # ========================================================================
    # Middleware Configuration
    # ========================================================================
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=".*" if settings.is_development else None,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "verif-hash"],
    )

    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # Request ID middleware for tracing
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(time.time()))
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)

    # ========================================================================
    # Health Check & Routes
    # ========================================================================
    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Health check."""
        return "HIGH-ER Backend Active 🚀"

    for router in routes:
        app.include_router(router)

    logger.info(f"✓ Registered {len(routes)} routers")
    return app


app = create_app()


# ============================================================================
# CLI Commands
# ============================================================================
def check_credentials():
    """Exit with status 1 when no service account credential is available."""
    try:
        return resolve_credentials(default_providers(settings))
    except CredentialError as e:
        logger.critical(f"✗ {e}")
        sys.exit(1)


@click.group()
def cli():
    """HIGH-ER backend management CLI."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=settings.port, help="Port to run the server on")
@click.option("--reload", is_flag=True, help="Enable auto-reload (development only)")
def dev(host: str, port: int, reload: bool):
    """Run development server with Uvicorn."""
    check_credentials()

    logger.info("Starting development server...")
    logger.info(f"  - Host: {host}")
    logger.info(f"  - Port: {port}")
    logger.info(f"  - Reload: {reload}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="debug",
        access_log=True,
    )


@cli.command()
@click.option("--host", default=settings.host, help="Host to bind the server to")
@click.option("--port", default=settings.port, help="Port to run the server on")
@click.option("--workers", default=2, help="Number of worker processes")
def prod(host: str, port: int, workers: int):
    """Run production server with Gunicorn."""
    check_credentials()

    logger.info("Starting production server with Gunicorn...")
    logger.info(f"  - Host: {host}")
    logger.info(f"  - Port: {port}")
    logger.info(f"  - Workers: {workers}")

    cmd = [
        "gunicorn",
        "main:app",
        "--worker-class",
        "uvicorn.workers.UvicornWorker",
        "--workers",
        str(workers),
        "--bind",
        f"{host}:{port}",
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
        "--log-level",
        "info",
        "--timeout",
        "120",
        "--graceful-timeout",
        "30",
        "--keep-alive",
        "5",
    ]

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Gunicorn failed to start: {e}")
        raise click.ClickException(str(e))
    except FileNotFoundError:
        logger.error("Gunicorn not found. Install it with: pip install gunicorn")
        raise click.ClickException("Gunicorn not installed")


@cli.command()
def info():
    """Display application information."""
    click.echo(f"Application: {settings.app_name}")
    click.echo(f"Version: {settings.app_version}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Allowed Origins: {', '.join(settings.allowed_origins)}")
    click.echo(f"Payment Currency: {settings.payment_currency}")
    click.echo(f"Webhook Secret Set: {bool(settings.flw_secret_hash)}")
    click.echo(f"Email Configured: {bool(settings.resend_api_key)}")
    click.echo(f"Logs Directory: {LOGS_DIR.absolute()}")
    try:
        resolved = resolve_credentials(default_providers(settings))
        click.echo(f"Credentials: {resolved.source}")
    except CredentialError:
        click.echo("Credentials: none found")


if __name__ == "__main__":
    cli()
