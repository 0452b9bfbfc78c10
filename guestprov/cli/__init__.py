"""CLI package exports for top-level command entry points."""

from __future__ import annotations

from .main import GuestProvModalCLI, main

__all__ = ['GuestProvModalCLI', 'main']
