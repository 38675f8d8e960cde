"""Restart orchestrator - rolling restarts for Kubernetes workloads selected by name."""

from restart_orchestrator.__version__ import __version__

__all__ = ["__version__"]
