"""Data models for Helm Audit."""
