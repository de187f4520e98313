"""Lockwright: backtracking dependency resolution with round-trip-stable lockfiles."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
