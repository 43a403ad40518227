# wavtempo/config/models.py

"""
Pydantic models for defining the structure and validation of the wavtempo configuration (wavtempo.toml).
Uses Pydantic V2 syntax.
"""

from pathlib import Path
from typing import Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wavtempo.core.audio.io import AudioFormat
from wavtempo.core.stretch import StretchParameters


def _resolve_path(path: Union[str, Path]) -> Path:
    """Resolves and expands user paths."""
    return Path(path).expanduser().resolve()


class FormatConfig(BaseModel):
    """Format every input file must have before it reaches the engine."""
    channels: int = Field(1, ge=1, description="Required channel count.")
    sample_rate: int = Field(16000, gt=0, description="Required sample rate (Hz).")
    subtype: Literal["PCM_16", "PCM_32"] = Field("PCM_16", description="Required soundfile sample subtype.")

    def to_audio_format(self) -> AudioFormat:
        return AudioFormat(channels=self.channels, sample_rate=self.sample_rate, subtype=self.subtype)


class EngineConfig(BaseModel):
    """Frame geometry of the stretch engine, expressed as durations."""
    frame_ms: float = Field(64.0, gt=0, description="Frame duration in milliseconds.")
    tolerance_ms: float = Field(20.0, ge=0, description="Similarity search tolerance on each side, in milliseconds.")
    search_stride: int = Field(1, ge=1, description="Step between similarity search candidates, in samples.")
    overlap_ratio: float = Field(0.5, ge=0.5, lt=1.0, description="Fraction of a frame shared with the next one.")

    def to_parameters(self, sample_rate: int) -> StretchParameters:
        return StretchParameters.from_durations(
            sample_rate,
            frame_ms=self.frame_ms,
            tolerance_ms=self.tolerance_ms,
            search_stride=self.search_stride,
            overlap_ratio=self.overlap_ratio,
        )


class BatchConfig(BaseModel):
    """Directory processing behaviour."""
    extensions: List[str] = Field(default_factory=lambda: [".wav"], description="File extensions to process.")
    workers: int = Field(1, ge=0, description="Worker processes (1 = in-process, 0 = one per CPU).")
    on_error: Literal["skip", "abort"] = Field("skip", description="Per-file failure policy.")
    excluded_dirs: List[str] = Field(default_factory=lambda: ["__pycache__", ".git", ".venv"])

    @field_validator("extensions")
    @classmethod
    def normalise_extensions(cls, value: List[str]) -> List[str]:
        """Lower-cases extensions and adds the leading dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class PathsConfig(BaseModel):
    """Configuration for file paths used by wavtempo."""
    log_directory: Path = Field(default=Path("./wavtempo_logs"), description="Directory for log files.")

    @field_validator("log_directory", mode="before")
    @classmethod
    def resolve_paths_before_validation(cls, value: Any) -> Path:
        """Resolves paths before Pydantic validates them."""
        if isinstance(value, (str, Path)):
            return _resolve_path(value)
        return value


class LoggingConfig(BaseModel):
    """Logging configuration settings."""
    log_file_enabled: bool = Field(False, description="Enable/disable persistent file logging.")
    log_filename_template: str = Field("wavtempo_run_{timestamp:%Y%m%d_%H%M%S}.log", description="Naming pattern for log files.")
    log_level_file: str = Field("DEBUG", description="Minimum level for file logs.")
    log_format: str = Field("%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)", description="Format string for file log entries.")

    @field_validator("log_level_file")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        """Validate log level strings."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of {allowed_levels}")
        return upper_value


class WavTempoConfig(BaseModel):
    """Root configuration model for wavtempo."""
    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
    )

    format: FormatConfig = Field(default_factory=FormatConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
