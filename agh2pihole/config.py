"""Run configuration shared by the CLI and the pipeline driver."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Final


# Default configuration
DEFAULT_OUTPUT_DIR: Final[str] = "pihole_lists"
DEFAULT_TIMEOUT: Final[int] = 30
DEFAULT_RETRIES: Final[int] = 3
DEFAULT_CONCURRENCY: Final[int] = 8

USER_AGENT: Final[str] = "agh2pihole/1.0"


@dataclass
class Settings:
    """
    Everything the driver needs to know about a run.

    The output directory lives here and is handed to the driver explicitly;
    the core modules never see it.
    """
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    timeout: int = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    concurrency: int = DEFAULT_CONCURRENCY
    verbose: bool = False

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.retries < 1:
            raise ValueError(f"retries must be >= 1, got {self.retries}")
        if self.timeout < 1:
            raise ValueError(f"timeout must be >= 1, got {self.timeout}")
