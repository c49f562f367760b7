"""
Analysis options and config-file loading
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import ConfigError

DEFAULT_OUTPUT_DIR = "./target"
DEFAULT_TIMER_FILE = "cg_timing.txt"


class OutputFormat(str, Enum):
    """Artifact formats"""
    TEXT = "text"
    JSON = "json"
    BOTH = "both"

    @property
    def wants_text(self) -> bool:
        return self in (OutputFormat.TEXT, OutputFormat.BOTH)

    @property
    def wants_json(self) -> bool:
        return self in (OutputFormat.JSON, OutputFormat.BOTH)


class AnalysisOptions(BaseModel):
    """Options consumed by the analysis core"""
    deduplicate: bool = Field(default=True, description="Collapse call sites per caller/callee pair")
    without_args: bool = Field(default=False, description="Emit paths without generic arguments")
    find_callers: List[str] = Field(default_factory=list, description="Path queries for find-callers")
    find_callers_by_hash: List[str] = Field(default_factory=list, description="Identity queries for find-callers")
    output_format: OutputFormat = Field(default=OutputFormat.TEXT, description="Artifact format")
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, description="Directory for artifacts")
    timer_output: Optional[str] = Field(None, description="Timing report destination")
    entry_points: List[str] = Field(default_factory=list, description="Entry point paths overriding the IR")
    workers: int = Field(default=1, ge=1, description="Worker threads for extraction and queries")
    emit_graph: bool = Field(default=True, description="Write the call graph artifact")

    @model_validator(mode='after')
    def _check_query_modes(self) -> 'AnalysisOptions':
        if self.find_callers and self.find_callers_by_hash:
            raise ValueError("find_callers and find_callers_by_hash are mutually exclusive")
        return self

    @property
    def timing_enabled(self) -> bool:
        return self.timer_output is not None

    @property
    def has_queries(self) -> bool:
        return bool(self.find_callers or self.find_callers_by_hash)

    def output_path(self, file_name: str) -> Path:
        return Path(self.output_dir) / file_name


def build_options(data: Dict[str, Any], source: str = "<options>") -> AnalysisOptions:
    """Validate a mapping of options"""
    try:
        return AnalysisOptions(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid options in {source}: {e}") from e


def load_options(config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> AnalysisOptions:
    """Load options from a YAML file, then apply non-None overrides"""
    data: Dict[str, Any] = {}
    source = "<command line>"

    if config_file:
        path = Path(config_file)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_file}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_file}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")
        data.update(loaded)
        source = config_file

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        # Empty repeated CLI options should not wipe config-file lists
        if isinstance(value, list) and not value and key in data:
            continue
        data[key] = value

    return build_options(data, source)
