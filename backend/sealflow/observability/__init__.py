"""Observability module for SealFlow.

Provides structured logging, request IDs, metrics and health checks.
"""
