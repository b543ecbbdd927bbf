"""API route handlers."""

from api.routes import coverage, health, ledger, merkle

__all__ = ["coverage", "health", "ledger", "merkle"]
