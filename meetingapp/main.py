import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import CORS_ORIGINS
from .database import Base, engine, get_db
from .domain.accounts.router import router as accounts_router
from .domain.meetings.router import router as meetings_router
from .domain.notes.router import router as notes_router
from .domain.participants.router import router as participants_router
from .domain.registrations.router import router as registrations_router
from .domain.trainings.router import router as trainings_router
from .exceptions import (
    CredentialOperationError,
    DuplicateRegistrationError,
    EmailDeliveryError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.ERROR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database tables: {e}")

    yield
    logger.info("Application shutting down...")
    engine.dispose()


app = FastAPI(title="MeetingApp API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(f"Authentication failed for {request.url.path}: Missing or invalid Authorization header")
            return JSONResponse(status_code=401, content={"detail": "Not authenticated"})

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(ValidationError)
async def domain_validation_handler(request: Request, exc: ValidationError):
    logger.info(f"ℹ️ Rejected {request.method} {request.url.path}: {exc}")
    content = {"detail": str(exc)}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=422, content=content)


@app.exception_handler(DuplicateRegistrationError)
async def duplicate_registration_handler(request: Request, exc: DuplicateRegistrationError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(CredentialOperationError)
async def credential_error_handler(request: Request, exc: CredentialOperationError):
    logger.error(f"❌ Credential backend failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Credential service unavailable, please retry"})


@app.exception_handler(EmailDeliveryError)
async def email_delivery_handler(request: Request, exc: EmailDeliveryError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(accounts_router)
app.include_router(meetings_router)
app.include_router(participants_router)
app.include_router(notes_router)
app.include_router(trainings_router)
app.include_router(registrations_router)


@app.get("/")
def root():
    return {"message": "MeetingApp API is running"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"❌ Health check database probe failed: {e}")
        database = "unavailable"
    return {"status": "healthy" if database == "ok" else "degraded", "database": database}
