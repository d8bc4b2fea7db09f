from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user

from .ai import router as ai_router
from .auth import router as auth_router
from .health import router as health_router
from .ideas import router as ideas_router
from .trends import router as trends_router


# Public API router (health, auth)
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router)


# Protected routers: every route requires a bearer token. The dependency
# also surfaces the OAuth2 security scheme in OpenAPI.
protected_deps = [Depends(get_current_user)]
api_router.include_router(ai_router, dependencies=protected_deps)
api_router.include_router(ideas_router, dependencies=protected_deps)
api_router.include_router(trends_router, dependencies=protected_deps)
