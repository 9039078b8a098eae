"""Filesystem-backed lease document tiers."""
