"""
mediaboard command line interface.
"""

from mediaboard import __version__

__all__ = ['__version__']
