"""Shared helpers for normalization and clinic-local dates."""
