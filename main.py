#!/usr/bin/env python3
"""
Main entry point for calo tau production.

Supports:
  - Single-job execution (default)
  - Batch job execution via --batch-job-index / --total-batch-jobs
  - Shared run directory via --run-dir (for multi-job PBS arrays)
"""

import sys
import os
import logging
import argparse
import yaml

from domain.config import PipelineConfig
from pipeline.executor import PipelineExecutor
from utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Calo tau candidate production",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single job with default config
  python main.py

  # Custom config, reproducible synthetic vertices
  python main.py --config my_config.yaml --seed 1234

  # Batch array job on its slice of the events
  python main.py --batch-job-index 1 --total-batch-jobs 4 --run-dir ./output/run_shared

  # Dry-run to validate config
  python main.py --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running the job"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for synthetic vertex sampling (overrides producer_config.seed)"
    )

    batch_group = parser.add_argument_group("Batch Job Options")
    batch_group.add_argument(
        "--batch-job-index", type=int, default=None,
        help="This job's index (1-based, matching PBS $PBS_ARRAY_INDEX)"
    )
    batch_group.add_argument(
        "--total-batch-jobs", type=int, default=None,
        help="Total number of batch jobs"
    )
    batch_group.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created shared run directory (skips timestamped dir creation)"
    )

    args = parser.parse_args(argv)

    if args.batch_job_index is not None and args.total_batch_jobs is None:
        parser.error("--total-batch-jobs is required when --batch-job-index is set")
    if args.total_batch_jobs is not None and args.batch_job_index is None:
        parser.error("--batch-job-index is required when --total-batch-jobs is set")

    return args


def apply_cli_overrides(config_dict: dict, args) -> dict:
    """Inject CLI values into the raw config (CLI wins over YAML)."""
    config_dict = dict(config_dict)
    if args.batch_job_index is not None:
        run_metadata = dict(config_dict.get("run_metadata") or {})
        run_metadata["batch_job_index"] = args.batch_job_index
        run_metadata["total_batch_jobs"] = args.total_batch_jobs
        config_dict["run_metadata"] = run_metadata
    if args.seed is not None:
        producer_config = dict(config_dict.get("producer_config") or {})
        producer_config["seed"] = args.seed
        config_dict["producer_config"] = producer_config
    return config_dict


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Calo tau production")
    logger.info("=" * 60)

    try:
        logger.info(f"Loading configuration from: {args.config}")
        config_dict = apply_cli_overrides(load_config(args.config), args)

        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using shared run directory: {run_dir}")
        else:
            run_metadata = config_dict.get('run_metadata') or {}
            run_name = run_metadata.get('run_name', 'calo_tau_run')
            base_output = run_metadata.get('base_output_dir', './output')
            run_dir = create_timestamped_run_dir(base_output, run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        config_dict = update_config_paths_with_run_dir(config_dict, run_dir)

        config = PipelineConfig.from_dict(config_dict)
        logger.info("Configuration loaded and validated successfully")

        batch_info = ""
        if config.batch_job_index is not None:
            batch_info = f" (batch {config.batch_job_index}/{config.total_batch_jobs})"

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, exiting")
            logger.info(f"Inputs: {list(config.input_config.input_paths)}")
            logger.info(f"Run directory: {run_dir}")
            return 0

        executor = PipelineExecutor(config)
        final_context = executor.run()

        if config.batch_job_index is not None:
            executor.save_batch_stats(run_dir, config.batch_job_index, final_context)

        if final_context.is_successful:
            logger.info(f"✓ Job completed successfully{batch_info}")
            return 0
        else:
            logger.error(f"✗ Job failed: {final_context.error_message}")
            return 1

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
