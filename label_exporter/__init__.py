"""Metrics relabeling proxy for Prometheus exposition endpoints."""

__version__ = "0.3.0"
