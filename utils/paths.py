"""
Path utilities for production jobs.

Handles timestamped run directories and output path defaults.
"""

import os
from datetime import datetime
from typing import Optional


def create_timestamped_run_dir(base_output_dir: str, run_name: Optional[str] = None) -> str:
    """
    Create a timestamped directory for the current run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "test_run")
        -> "./output/test_run_20260216_211730"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def update_config_paths_with_run_dir(config_dict: dict, run_dir: str) -> dict:
    """
    Point the output configuration at the run directory.

    A relative (or missing) ``output_config.output_dir`` is replaced with
    ``<run_dir>/products``; an absolute one is left untouched. The
    ``logs/`` sub-directory is created for batch statistics.

    Args:
        config_dict: Configuration dictionary
        run_dir: Run directory path

    Returns:
        Updated configuration dictionary
    """
    updated_config = config_dict.copy()

    for d in ("products", "logs"):
        os.makedirs(os.path.join(run_dir, d), exist_ok=True)

    output_config = dict(updated_config.get("output_config") or {})
    output_dir = output_config.get("output_dir")
    if not output_dir or not os.path.isabs(output_dir):
        output_config["output_dir"] = os.path.join(run_dir, "products")
    updated_config["output_config"] = output_config

    return updated_config
