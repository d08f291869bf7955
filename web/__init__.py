"""Flask admin server."""
