"""Service wiring."""
