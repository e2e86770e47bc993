# barter/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from barter import __version__
from barter.api import conversations, ratings, swaps, sync
from barter.api.errors import register_error_handlers
from barter.config import settings
from barter.database import Base, engine
from barter import models  # noqa: F401 - register tables on Base.metadata

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables (Alembic owns the schema outside local development)
if settings.APP_ENV == "development":
    Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="Barter API", version=__version__)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# API routers
app.include_router(swaps.router)          # /swaps/*
app.include_router(conversations.router)  # /conversations/*
app.include_router(ratings.router)        # /ratings/*
app.include_router(sync.router)           # /sync/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "Barter API is running",
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("barter.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
