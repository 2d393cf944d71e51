"""Forgewright: AI-assisted release readiness and release execution."""

__version__ = "0.3.0"
