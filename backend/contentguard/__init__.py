"""Content moderation pipeline for stored images, videos and text."""

__version__ = "0.1.0"
