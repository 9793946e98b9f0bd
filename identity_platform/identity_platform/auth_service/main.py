"""
Auth Service - user registration, login and role assignment over HTTP
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .config import settings
from .db import init_db
from .routes import auth, health
from .schemas import FieldError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Validate signing settings and initialize the database on startup"""
    issuer = auth.get_token_issuer()
    logger.info("Token signing configured: issuer=%s, audience=%s", issuer.config.issuer, issuer.config.audience)
    init_db()
    yield


app = FastAPI(
    title="Auth Service",
    description="User registration, login and role assignment with signed bearer tokens",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError):
    # Malformed bodies are reported like any other input error
    errors = [
        FieldError(field=str(err["loc"][-1]), message=err["msg"]).model_dump()
        for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": errors})


# Include routers
app.include_router(auth.router)
app.include_router(health.router)
