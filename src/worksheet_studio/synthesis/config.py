"""
Module: synthesis.config

Purpose:
    Configuration dataclass for the synthesis pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - SynthesisConfig: Settings for the controller and its outputs

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - synthesis.controller: Export orchestration
    - worksheet_studio.cli: Command line overrides
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .layout.config import LayoutConfig

#: Pending "regenerating" state clears after this many seconds.
DEFAULT_REGENERATION_TIMEOUT_S = 8.0
DEFAULT_FETCH_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class SynthesisConfig:
    """
    Configuration for synthesizing views and documents (immutable).

    Attributes:
        layout: Page geometry for the screen/print renderer
        output_dir: Directory downloads are written to
        regeneration_timeout_s: Bounded wait before a pending image
            regeneration stops showing as in progress
        fetch_timeout_s: Timeout for reference image URL fetches
        max_workers: Background threads for generation calls

    Example:
        >>> config = SynthesisConfig(output_dir=Path("downloads"))
        >>> config.regeneration_timeout_s
        8.0
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    output_dir: Optional[Path] = None

    regeneration_timeout_s: float = DEFAULT_REGENERATION_TIMEOUT_S
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    max_workers: int = 2

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.regeneration_timeout_s <= 0:
            raise ValueError(
                f"regeneration_timeout_s must be positive: {self.regeneration_timeout_s}"
            )
        if self.fetch_timeout_s <= 0:
            raise ValueError(f"fetch_timeout_s must be positive: {self.fetch_timeout_s}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1: {self.max_workers}")

    @property
    def resolved_output_dir(self) -> Path:
        """Output directory, defaulting to the working directory."""
        return self.output_dir if self.output_dir is not None else Path.cwd()
