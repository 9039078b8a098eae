"""Lease lifecycle services."""
