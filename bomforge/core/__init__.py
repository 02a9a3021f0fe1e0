"""Shared infrastructure: settings and executable lookup."""
