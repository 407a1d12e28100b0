"""Controle Técnico.

Administrative API tracking applications, their hostings and domains,
and the secrets they depend on (stored encrypted with AES-256-GCM).
"""
from .version import __version__

__all__ = ["__version__"]
