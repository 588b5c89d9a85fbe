"""
mediaboard

A pluggable media-management core: priority-ordered extensions reacting to
typed events, and a media ingestion pipeline that validates uploads,
archives them in content-addressed storage and derives thumbnails.
"""

__version__ = "0.3.0"
