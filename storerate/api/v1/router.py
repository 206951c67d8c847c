"""API v1 router combining all route modules."""

from fastapi import APIRouter

from storerate.api.v1 import auth, health, ratings, stores, users

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)

# Sign-up and login (public, rate limited)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# User management (admin) and self-service profile
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"],
)

# Stores
api_router.include_router(
    stores.router,
    prefix="/stores",
    tags=["stores"],
)

# Ratings
api_router.include_router(
    ratings.router,
    prefix="/ratings",
    tags=["ratings"],
)
