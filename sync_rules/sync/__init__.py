"""
Multi-project synchronization package.
"""

from .multi_sync import MultiSyncOptions, run_multi_sync

__all__ = ["MultiSyncOptions", "run_multi_sync"]
