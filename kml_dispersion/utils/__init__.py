"""Shared helpers used across activities (projection, bounding boxes)."""
