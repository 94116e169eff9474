"""Scheduled job entry points."""
