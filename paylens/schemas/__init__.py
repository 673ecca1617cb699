"""Canonical and gateway wire schemas."""
