"""
CLI runner module.

Provides commands:
- login: Check credentials
- lock / renew / unlock: Manage lease locks
- upload: Multipart upload of an attachment
- upload-status: Inspect an upload session
- init-config: Write a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
