"""Notification transports."""
