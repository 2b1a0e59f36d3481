"""
Main FastAPI application entry point.
Sets up the API, middleware, error handlers, and routes.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from bank_api.api import accounts, transactions
from bank_api.core.config import settings
from bank_api.core.exceptions import ApplicationError, GeneralApplicationError
from bank_api.core.logging_config import configure_logging, get_logger
from bank_api.database import Base, engine, get_db
from bank_api import models  # noqa: F401  registers tables on Base.metadata

configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create database tables on startup.
    """
    logger.info("starting", version=settings.VERSION, database=engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    yield
    logger.info("shutting_down")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc UI
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Invalid request data is a 400, like every other client error here.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    """
    Translate the error taxonomy into its HTTP status.
    Business errors were already logged by the service that raised them.
    """
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """
    Log the cause under a tracking id and hide it from the caller.
    """
    error = GeneralApplicationError()
    logger.error(
        "unhandled_exception",
        error_id=error.error_id,
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "errorId": error.error_id},
    )


@app.get("/")
def root():
    """
    Root endpoint - service information.
    """
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "accounts": f"{settings.API_PREFIX}/account",
            "transactions": f"{settings.API_PREFIX}/transactionhistory"
        }
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for monitoring.
    """
    db.execute(text("SELECT 1"))
    return {
        "status": "healthy",
        "database": "connected"
    }


# Include API routers
app.include_router(accounts.router, prefix=settings.API_PREFIX)
app.include_router(transactions.router, prefix=settings.API_PREFIX)
