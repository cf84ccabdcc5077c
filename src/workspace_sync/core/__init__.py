"""Core async helpers shared by the sync engines."""
