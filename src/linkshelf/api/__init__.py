"""API route aggregation.

All routers registered here get mounted in main.py.

The session gate is applied at the include_router level through the
dependencies parameter, so every route in a protected router is covered
without touching individual handlers. Health, auth and public routers are
open (auth protects its own account routes per route).
"""

from fastapi import APIRouter, Depends

from linkshelf.api.auth import router as auth_router
from linkshelf.api.caches import router as caches_router
from linkshelf.api.groups import router as groups_router
from linkshelf.api.health import router as health_router
from linkshelf.api.links import router as links_router
from linkshelf.api.public import router as public_router
from linkshelf.auth.dependencies import require_session

# All protected routers require a valid session cookie
_auth = [Depends(require_session)]

api_router = APIRouter(prefix="/api")

# Open routes, no session required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(public_router, tags=["public"])

# Protected routes
api_router.include_router(groups_router, tags=["groups"], dependencies=_auth)
api_router.include_router(links_router, tags=["links"], dependencies=_auth)
api_router.include_router(caches_router, tags=["caches"], dependencies=_auth)
