"""
Utility modules for production jobs.
"""

from .batching import get_batch_slice
from .paths import (
    create_timestamped_run_dir,
    update_config_paths_with_run_dir,
)

__all__ = [
    "get_batch_slice",
    "create_timestamped_run_dir",
    "update_config_paths_with_run_dir",
]
