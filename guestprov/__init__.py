"""Provision running guests by invoking ``puppet apply`` inside them."""

from __future__ import annotations

__version__ = '0.1.0'
