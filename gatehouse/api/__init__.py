"""HTTP API for Gatehouse."""
