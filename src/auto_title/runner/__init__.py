"""
CLI runner module.

Provides commands:
- watch: Monitor the vault and suggest titles automatically
- generate: Title one note now
- regenerate: Title one note even if already processed
- test-connection: Check the provider configuration
- init: Write a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
