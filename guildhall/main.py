from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from guildhall.core.config import settings
from guildhall.core.exceptions import ServiceError
from guildhall.middleware.request_logging import RequestLoggingMiddleware
from guildhall.middleware.auth_logging import AuthLoggingMiddleware
from guildhall.modules.user_management.api.router import router as user_router
from guildhall.modules.comments.api.router import router as comments_router
from guildhall.modules.reactions.api.router import router as reactions_router
from guildhall.modules.follows.api.router import router as follows_router
from guildhall.modules.events.api.router import router as events_router
from guildhall.modules.notifications.api.router import router as notifications_router
from guildhall.db.init_db import create_all_tables

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("guildhall")

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.kind},
    )

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request data",
            "error": "validation",
            "errors": jsonable_encoder(exc.errors()),
        },
    )

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers={
        ServiceError: service_error_handler,
        RequestValidationError: validation_error_handler,
    },
    debug=settings.DEBUG,
    description="Comments, reactions, follows and event registration for the gaming community",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    create_all_tables()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(user_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(comments_router, prefix=f"{settings.API_V1_STR}/comments", tags=["comments"])
app.include_router(reactions_router, prefix=f"{settings.API_V1_STR}/reactions", tags=["reactions"])
app.include_router(follows_router, prefix=f"{settings.API_V1_STR}/follow", tags=["follow"])
app.include_router(events_router, prefix=f"{settings.API_V1_STR}/events", tags=["events"])
app.include_router(notifications_router, prefix=f"{settings.API_V1_STR}/notifications", tags=["notifications"])

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("guildhall.main:app", host="0.0.0.0", port=8000, reload=True)
