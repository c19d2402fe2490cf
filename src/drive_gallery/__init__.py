"""Build-time Google Drive media manifest and gallery state."""

__version__ = "0.1.0"
