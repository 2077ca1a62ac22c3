"""Raw record models, response shapes and the response projector."""

from .pagination import build_page_links
from .projector import ProjectionError, ResponseProjector

__all__ = ["ProjectionError", "ResponseProjector", "build_page_links"]
