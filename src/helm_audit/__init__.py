"""Helm Audit - release snapshots and drift classification for Helm 3 clusters."""

__version__ = "0.1.0"
