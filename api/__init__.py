"""
Module 08 - HTTP API (FastAPI)

HTTP API for CoverPass:
- POST /merkle/build, /merkle/prove, /merkle/verify
- POST /documents/hash
- GET /ledger/current, /ledger/history, /ledger/stats, /ledger/blocks/{n}
- POST /ledger/publish, /coverage/verify
- GET /health

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
