"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from inkwell.api.v1.endpoints import auth, posts, profile, users

api_router = APIRouter()

# Registration & login (public)
api_router.include_router(auth.router)

# Posts (public reads, owner-or-admin writes)
api_router.include_router(posts.router)

# The caller's own account
api_router.include_router(profile.router)

# Account management (admin only)
api_router.include_router(users.router)
