# peermentor/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peermentor import models  # noqa: F401 - register every table on Base.metadata
from peermentor.api import admin, auth, course, matching, notification, question, session, users
from peermentor.config import settings
from peermentor.database import Base, engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="PeerMentor API")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)          # /auth/*
app.include_router(users.router)         # /users/*
app.include_router(course.router)        # /courses/*
app.include_router(question.router)      # /questions/*
app.include_router(session.router)       # /sessions/*
app.include_router(notification.router)  # /notifications/*
app.include_router(matching.router)      # /matching/*
app.include_router(admin.router)         # /admin/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "PeerMentor API is running",
        "version": "1.0.0",
    }


@app.get("/debug/routes", include_in_schema=False)
def list_routes():
    """List all registered API routes for debugging."""
    paths = app.openapi().get("paths", {})
    routes = [
        {"path": path, "methods": sorted(method.upper() for method in operations)}
        for path, operations in sorted(paths.items())
    ]
    return {"routes": routes}
