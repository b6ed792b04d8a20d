"""Run orchestration for ZPeaks."""

from zpeaks.services.run.config import RunConfig, RunMode
from zpeaks.services.run.runners import (
    RUNNERS,
    BottomUpRunner,
    ChromosomeResult,
    ReplicatedRunner,
    RunSummary,
    SingleFileRunner,
    TopDownRunner,
    ZRunner,
    get_runner,
    run,
)

__all__ = [
    "RUNNERS",
    "BottomUpRunner",
    "ChromosomeResult",
    "ReplicatedRunner",
    "RunConfig",
    "RunMode",
    "RunSummary",
    "SingleFileRunner",
    "TopDownRunner",
    "ZRunner",
    "get_runner",
    "run",
]
