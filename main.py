"""
Taskboard - FastAPI Backend
Main application entry point with CORS, routing and error handling setup
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import logging
import os
from dotenv import load_dotenv

# Load environment variables BEFORE importing route modules so services see them
load_dotenv()
from datetime import datetime

from routes.auth_routes import router as auth_router
from routes.ai_routes import router as ai_router
from utils.config import get_settings
from utils.exceptions import TaskboardError

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Taskboard",
    description="Kanban task tracker with OTP-gated email/password authentication",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(ai_router, prefix="/api/ai", tags=["AI"])


@app.get("/")
async def root():
    """Root endpoint with basic API information"""
    return {
        "message": "Taskboard API",
        "version": "1.0.0",
        "status": "active",
        "endpoints": {
            "health": "/ping",
            "auth": "/api/auth",
            "ai": "/api/ai",
            "docs": "/docs"
        }
    }


@app.get("/ping")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "taskboard-api"
    }


@app.exception_handler(TaskboardError)
async def taskboard_error_handler(request: Request, exc: TaskboardError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    content = {"error": exc.code, "detail": exc.message}
    reason = getattr(exc, "reason", None)
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler"""
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "detail": "Endpoint not found", "path": str(request.url)}
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler"""
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error"}
    )


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level=settings.log_level.lower()
    )
