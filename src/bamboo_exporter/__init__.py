"""Prometheus exporter for Atlassian Bamboo."""

__version__ = "0.1.0"
