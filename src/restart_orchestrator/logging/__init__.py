"""Logging configuration for restart_orchestrator."""

from restart_orchestrator.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
