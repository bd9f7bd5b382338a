"""Streaming availability lookups."""
