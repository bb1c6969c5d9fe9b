"""
Finance Ledger - Source Package

A local personal finance ledger: add, edit, delete, search and summarize
transactions, persisted to a local file and importable/exportable as JSON.

DESIGN PRINCIPLES:
1. Validate before every change
2. Search never crashes on a half-typed pattern
3. Escape everything that reaches the screen
4. Storage layer is swappable
"""

__version__ = "1.0.0"
