"""Beacon: uniform request logging, metrics and tracing for thin HTTP services."""

__version__ = "1.0.0"
