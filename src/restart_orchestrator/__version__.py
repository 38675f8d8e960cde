"""Version information for restart_orchestrator."""

__version__ = "0.1.0"
