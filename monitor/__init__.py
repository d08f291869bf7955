"""Resource collection, recommendations and the alert scheduler."""
