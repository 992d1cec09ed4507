"""Structured logging and Prometheus metrics for kubedeps."""
