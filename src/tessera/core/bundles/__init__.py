"""Bundle parsing: directory layout to immutable records."""
from __future__ import annotations

from .models import Agent, Bundle, Command, Hook, ParseDiagnostic
from .parser import BundleParser

__all__ = [
    "Agent",
    "Bundle",
    "Command",
    "Hook",
    "ParseDiagnostic",
    "BundleParser",
]
