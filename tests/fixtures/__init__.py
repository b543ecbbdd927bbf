"""
Test fixtures package for CoverPass tests.

This package provides factory functions for creating test objects:
- common.py: leaves, documents, deterministic clock, service factory

Usage:
    from fixtures.common import make_leaves, make_service

    def test_something(tmp_path):
        service = make_service(tmp_path)
"""

from .common import (
    ADMIN,
    HOLDERS,
    INSURER,
    VERIFIER,
    make_clock,
    make_document,
    make_documents,
    make_leaves,
    make_service,
)

__all__ = [
    "ADMIN",
    "HOLDERS",
    "INSURER",
    "VERIFIER",
    "make_clock",
    "make_document",
    "make_documents",
    "make_leaves",
    "make_service",
]
