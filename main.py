from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from contextlib import asynccontextmanager
import logging
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import modules
from studycards.ai import ai_router
from studycards.config import get_settings
from studycards.errors import FlashcardServiceError, flashcard_error_handler
from studycards.history import history_router
from studycards.profile import profile_router

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Study Cards Backend...")
    if not settings.has_groq or not settings.has_supabase:
        logger.warning("Service credentials are incomplete; generation requests will fail until configured")
    yield
    # Shutdown
    logger.info("Shutting down Study Cards Backend...")


# Create FastAPI application
app = FastAPI(
    title="Study Cards Backend API",
    description="AI flashcard generation from notes and question banks",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(FlashcardServiceError, flashcard_error_handler)

# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for deployment testing"""
    return {
        "status": "healthy",
        "message": "Study Cards Backend is running!",
        "version": "1.0.0"
    }

# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Study Cards Backend API",
        "docs": "/docs",
        "health": "/health",
        "version": "1.0.0"
    }

# Include routers
app.include_router(ai_router, prefix="/api", tags=["AI Services"])
app.include_router(history_router, prefix="/api/history", tags=["History"])
app.include_router(profile_router, prefix="/api/profile", tags=["Profile"])


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", settings.host),
        port=int(os.getenv("PORT", settings.port)),
        reload=settings.debug
    )
