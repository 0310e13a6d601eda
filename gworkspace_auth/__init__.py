"""Environment-aware Google Workspace OAuth for read-only Gmail and Calendar access."""

__version__ = "0.1.0"
