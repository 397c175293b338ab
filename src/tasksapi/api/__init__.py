"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: The task router is protected at the include_router level using
FastAPI's dependencies parameter, so no task route can run without a
verified identity. The user router mixes open routes (register, login)
with protected ones, so it declares get_current_user per route instead.
"""

from fastapi import APIRouter, Depends

from tasksapi.api.tasks import router as tasks_router
from tasksapi.api.users import router as users_router
from tasksapi.auth.dependencies import get_current_user

_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open / mixed routes
api_router.include_router(users_router, tags=["users"])

# Protected routes: a valid session token is required
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
