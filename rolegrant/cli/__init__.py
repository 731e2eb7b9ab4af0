"""
Command line interface for rolegrant.
"""

from .main import main, privileges_to_grant

__all__ = ["main", "privileges_to_grant"]
