"""Core services for Ferna."""
