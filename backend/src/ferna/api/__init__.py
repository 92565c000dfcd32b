"""HTTP API for Ferna."""
