"""Shared plumbing for external provider calls."""
