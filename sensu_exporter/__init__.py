"""Prometheus exporter for Sensu check results."""

__version__ = "0.3.0"
