"""HTTP API for link validation."""
