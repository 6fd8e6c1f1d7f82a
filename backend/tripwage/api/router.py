from __future__ import annotations

from fastapi import APIRouter

from tripwage.api.routes import auth, orders, users


api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, tags=["users"])
api_router.include_router(orders.router, tags=["orders"])
