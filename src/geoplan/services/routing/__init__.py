"""Route sequencing exports."""

from .optimizer import optimize, optimize_matrix

__all__ = ["optimize", "optimize_matrix"]
