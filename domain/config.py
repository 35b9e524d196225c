"""
Configuration domain models.

Validated configuration objects for the production job.
"""

from dataclasses import dataclass, field
from typing import Optional

SUPPORTED_INPUT_FORMATS = ("json", "root")

# Cones larger than this are rejected, matching the builder's own limits
MAX_CONE_SIZE = 0.6


@dataclass(frozen=True)
class CaloTauBuilderConfig:
    """Parameters of the reference calo tau builder."""

    lead_track_min_pt: float = 0.5
    track_min_pt: float = 0.5
    isolation_track_min_pt: float = 1.0
    isolation_track_min_hits: int = 0
    matching_cone_size: float = 0.10
    track_signal_cone_size: float = 0.07
    track_isolation_cone_size: float = 0.50
    ecal_signal_cone_size: float = 0.15
    ecal_isolation_cone_size: float = 0.50
    ecal_hit_min_et: float = 0.5
    use_lead_track_dz_constraint: bool = True
    track_lead_track_max_dz: float = 1.0

    def __post_init__(self):
        """Validate builder configuration."""
        for name in ("lead_track_min_pt", "track_min_pt", "isolation_track_min_pt",
                     "ecal_hit_min_et", "track_lead_track_max_dz"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.isolation_track_min_hits < 0:
            raise ValueError(
                f"isolation_track_min_hits must be non-negative, got {self.isolation_track_min_hits}"
            )
        for name in ("matching_cone_size", "track_signal_cone_size", "track_isolation_cone_size",
                     "ecal_signal_cone_size", "ecal_isolation_cone_size"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_CONE_SIZE:
                raise ValueError(f"{name} must be within [0, {MAX_CONE_SIZE}], got {value}")
        if self.track_signal_cone_size > self.track_isolation_cone_size:
            raise ValueError("track_signal_cone_size must not exceed track_isolation_cone_size")
        if self.ecal_signal_cone_size > self.ecal_isolation_cone_size:
            raise ValueError("ecal_signal_cone_size must not exceed ecal_isolation_cone_size")

    @classmethod
    def from_dict(cls, config_dict: Optional[dict]) -> 'CaloTauBuilderConfig':
        """Create from a dictionary. Unknown keys are rejected."""
        config_dict = config_dict or {}
        known = cls.__dataclass_fields__.keys()
        unknown = set(config_dict) - set(known)
        if unknown:
            raise ValueError(f"Unknown builder parameters: {sorted(unknown)}")
        return cls(**config_dict)


@dataclass(frozen=True)
class ProducerConfig:
    """
    Configuration of the per-event producer.

    Sigmas are in the same length unit as vertex coordinates.
    """

    pt_threshold: float = 0.0
    fallback_sigma_x: float = 0.0015
    fallback_sigma_y: float = 0.0015
    fallback_sigma_z: float = 0.005
    builder: str = "calo_tau"
    seed: Optional[int] = None
    builder_config: CaloTauBuilderConfig = field(default_factory=CaloTauBuilderConfig)

    def __post_init__(self):
        """Validate producer configuration."""
        for name in ("fallback_sigma_x", "fallback_sigma_y", "fallback_sigma_z"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if not self.builder:
            raise ValueError("builder cannot be empty")

    @property
    def fallback_sigmas(self) -> tuple[float, float, float]:
        return (self.fallback_sigma_x, self.fallback_sigma_y, self.fallback_sigma_z)

    @classmethod
    def from_dict(cls, config_dict: Optional[dict]) -> 'ProducerConfig':
        """
        Create ProducerConfig from a dictionary.

        Args:
            config_dict: The ``producer_config`` section of the job YAML

        Returns:
            Validated ProducerConfig instance
        """
        config_dict = config_dict or {}
        return cls(
            pt_threshold=float(config_dict.get("pt_threshold", 0.0)),
            fallback_sigma_x=float(config_dict.get("fallback_sigma_x", 0.0015)),
            fallback_sigma_y=float(config_dict.get("fallback_sigma_y", 0.0015)),
            fallback_sigma_z=float(config_dict.get("fallback_sigma_z", 0.005)),
            builder=config_dict.get("builder", "calo_tau"),
            seed=config_dict.get("seed"),
            builder_config=CaloTauBuilderConfig.from_dict(config_dict.get("builder_config") or {}),
        )


@dataclass(frozen=True)
class InputConfig:
    """Where the events come from."""

    input_paths: tuple[str, ...]
    input_format: str = "json"
    tree_name: str = "events"
    max_events: Optional[int] = None

    def __post_init__(self):
        """Validate input configuration."""
        if not self.input_paths:
            raise ValueError("input_paths cannot be empty")
        if self.input_format not in SUPPORTED_INPUT_FORMATS:
            raise ValueError(
                f"input_format must be one of {SUPPORTED_INPUT_FORMATS}, got {self.input_format!r}"
            )
        if self.max_events is not None and self.max_events <= 0:
            raise ValueError(f"max_events must be positive, got {self.max_events}")


@dataclass(frozen=True)
class OutputConfig:
    """Where the products go."""

    output_dir: str
    output_filename: str = "calo_taus.root"
    write_products: bool = True

    def __post_init__(self):
        """Validate output configuration."""
        if not self.output_dir:
            raise ValueError("output_dir cannot be empty")
        if not self.output_filename.endswith(".root"):
            raise ValueError(f"output_filename must end with .root, got {self.output_filename!r}")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete job configuration.

    Immutable configuration object validated at creation.
    """

    input_config: InputConfig
    producer_config: ProducerConfig = field(default_factory=ProducerConfig)
    output_config: Optional[OutputConfig] = None

    # Run metadata
    run_name: str = "calo_tau_run"
    batch_job_index: Optional[int] = None
    total_batch_jobs: Optional[int] = None
    show_progress_bar: bool = True

    def __post_init__(self):
        """Validate pipeline configuration."""
        if self.batch_job_index is not None:
            if self.total_batch_jobs is None:
                raise ValueError("total_batch_jobs required when batch_job_index is set")
            if not 1 <= self.batch_job_index <= self.total_batch_jobs:
                raise ValueError(
                    f"batch_job_index must be in 1..{self.total_batch_jobs}, "
                    f"got {self.batch_job_index}"
                )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance
        """
        input_dict = config_dict.get("input_config") or {}
        input_config = InputConfig(
            input_paths=tuple(input_dict.get("input_paths") or []),
            input_format=input_dict.get("input_format", "json"),
            tree_name=input_dict.get("tree_name", "events"),
            max_events=input_dict.get("max_events"),
        )

        producer_config = ProducerConfig.from_dict(config_dict.get("producer_config") or {})

        output_config = None
        output_dict = config_dict.get("output_config")
        if output_dict:
            output_config = OutputConfig(
                output_dir=output_dict.get("output_dir", ""),
                output_filename=output_dict.get("output_filename", "calo_taus.root"),
                write_products=output_dict.get("write_products", True),
            )

        run_metadata = config_dict.get("run_metadata") or {}

        return cls(
            input_config=input_config,
            producer_config=producer_config,
            output_config=output_config,
            run_name=run_metadata.get("run_name", "calo_tau_run"),
            batch_job_index=run_metadata.get("batch_job_index"),
            total_batch_jobs=run_metadata.get("total_batch_jobs"),
            show_progress_bar=run_metadata.get("show_progress_bar", True),
        )
