"""Top level API router registration."""
from fastapi import APIRouter, FastAPI

from pollster.api.routes import auth, health, organizations, questions, users, votes


def register_routes(application: FastAPI) -> None:
    """Register all API routers with the FastAPI application."""
    api_router = APIRouter(prefix="/api")

    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
    api_router.include_router(users.router, prefix="/users", tags=["users"])
    api_router.include_router(organizations.router, tags=["organizations"])
    api_router.include_router(organizations.organization_router, tags=["organizations"])
    api_router.include_router(votes.router, tags=["votes"])
    api_router.include_router(questions.router, tags=["questions"])
    api_router.include_router(questions.option_router, tags=["options"])

    application.include_router(api_router)


__all__ = ["register_routes"]
