"""Data models for vslparser."""
