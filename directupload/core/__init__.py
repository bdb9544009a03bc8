"""Core components of directupload."""
