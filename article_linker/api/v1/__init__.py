"""API v1 router and endpoint organization."""

from fastapi import APIRouter

from article_linker.api.v1 import links

router = APIRouter(tags=["v1"])

# Include domain-specific routers
router.include_router(links.router)
