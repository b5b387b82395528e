"""Command-line client for the KuberLogic API server: services, backups, restores and diagnostics."""

__version__ = "0.0.16"

__all__ = ["__version__"]