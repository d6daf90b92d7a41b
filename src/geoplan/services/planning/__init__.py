"""Route planning service exports."""

from .service import plan_route

__all__ = ["plan_route"]
