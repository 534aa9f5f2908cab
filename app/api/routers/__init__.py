from fastapi import APIRouter

from app.api.routers import recommend, search


def setup_routers() -> APIRouter:
    router = APIRouter()
    router.include_router(recommend.router)
    router.include_router(search.router)
    return router


__all__ = ["setup_routers"]
