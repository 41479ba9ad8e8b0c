"""
Kardex Kernel - domain types, decoding and logging for the Kardex engines.

A perpetual-inventory ledger model with:
- Immutable per-variant movement snapshots
- Multi-currency valuations tagged by currency id
- Typed decoding errors for malformed API payloads
- Structured JSON logging
"""

__version__ = "0.1.0"
