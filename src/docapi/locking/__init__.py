"""
Lock Manager.

Wraps the server's lease-lock endpoints (lock, renew, unlock). Lock state
lives on the server; the client only observes it through call results.
"""

from .manager import LockManager

__all__ = [
    "LockManager",
]
