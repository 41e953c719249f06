"""Cert image package."""

from .psa import PSAImageClient

__all__ = ["PSAImageClient"]
