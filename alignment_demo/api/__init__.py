"""HTTP surface of the alignment demo console."""

from fastapi import APIRouter

from .routes import alignments, assets, auth, console, player

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(assets.router)
api_router.include_router(alignments.router)
api_router.include_router(console.router)
api_router.include_router(player.router)

__all__ = ["api_router"]
