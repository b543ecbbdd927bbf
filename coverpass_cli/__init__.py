"""
Module 07 - CoverPass CLI

Command-line interface for insurers, verifiers and admins.

Usage:
    python -m coverpass_cli build --sample --out merkle_data.json
    python -m coverpass_cli verify --root 0x.. --leaf 0x.. --proof 0x.. 0x..
    python -m coverpass_cli publish --file docs.json --insurer 0x..
    python -m coverpass_cli ledger current
    python -m coverpass_cli roles grant insurer 0x.. --admin 0x..
"""

__version__ = "0.1.0"
