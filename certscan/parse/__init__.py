"""Cert parsing package."""

from .certs import find_cert_number, parse_certs

__all__ = ["find_cert_number", "parse_certs"]
