"""Valuation package."""

from .cardladder import CardLadderClient

__all__ = ["CardLadderClient"]
