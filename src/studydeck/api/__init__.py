"""HTTP routers of the flashcard service."""

from .collections import router as collections_router
from .documents import router as documents_router
from .exports import router as exports_router
from .status import router as status_router

__all__ = ["collections_router", "documents_router", "exports_router", "status_router"]
