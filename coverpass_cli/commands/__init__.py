"""
CLI command modules.
"""

from coverpass_cli.commands import admin, ledger, merkle

__all__ = ["admin", "ledger", "merkle"]
