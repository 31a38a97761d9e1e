from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import yaml
from pathlib import Path

from .core.geometry import CacheGeometry
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SimConfig:
    """Cache simulator run configuration."""
    # Cache geometry (s, E, b)
    set_index_bits: int = 0
    lines_per_set: int = 0
    offset_bits: int = 0

    # Trace input
    trace_file: str = ""

    # Config file
    config_file: str = ""

    # Output
    verbose: bool = False
    results_file: str = ".csim_results"
    report_dir: Optional[str] = None
    log_level: str = "WARNING"

    def geometry(self) -> CacheGeometry:
        """Builds the cache geometry described by this config."""
        return CacheGeometry(
            offset_bits=self.offset_bits,
            set_index_bits=self.set_index_bits,
            lines_per_set=self.lines_per_set,
        )

    def validate(self):
        """Checks that every required parameter is present and positive."""
        # YAML may hand over quoted numbers
        for key in ("set_index_bits", "lines_per_set", "offset_bits"):
            value = getattr(self, key)
            if isinstance(value, bool) or value is None:
                raise ValueError(f"{key} must be an integer, got {value!r}")
            try:
                setattr(self, key, int(value))
            except (TypeError, ValueError):
                raise ValueError(f"{key} must be an integer, got {value!r}") from None

        missing = [flag for flag, value in (("-s", self.set_index_bits),
                                            ("-E", self.lines_per_set),
                                            ("-b", self.offset_bits))
                   if not value or value < 0]
        if missing:
            raise ValueError(f"Missing or non-positive required argument(s): {', '.join(missing)}")
        if not self.trace_file:
            raise ValueError("Missing required argument: -t <file>")
        # raises on b + s >= 64
        self.geometry()

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        with open(yaml_path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}
        for key, value in yaml_config.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                logger.warning(f"Ignoring unknown config key '{key}' in {yaml_path}")

    @classmethod
    def from_args(cls, args) -> SimConfig:
        """Factory method to create a SimConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from YAML config file if provided
        if hasattr(args, 'config') and args.config:
            config.config_file = args.config
            if Path(config.config_file).exists():
                config.update_from_yaml(config.config_file)
            else:
                logger.warning(f"Config file {config.config_file} not found.")

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        return config
