"""crossboot — resumable staged execution for toolchain bootstraps.

    fetch      download once, atomically
    extract    unpack into a canonical directory
    markers    per-step completion records
    runner     run one step: skip, isolate, execute, mark
    pipeline   declared steps in dependency order
"""

from crossboot.errors import (
    ConfigError, CrossbootError, DownloadError, ExtractionError,
    PipelineError, StepFailure,
)
from crossboot.extract import extract_to
from crossboot.fetch import Artifact, fetch, fetch_artifact
from crossboot.markers import MarkerStore
from crossboot.pipeline import Pipeline, Step
from crossboot.runner import StepContext, StepRunner, StepStatus

__all__ = [
    "Artifact", "fetch", "fetch_artifact", "extract_to",
    "MarkerStore", "Pipeline", "Step",
    "StepContext", "StepRunner", "StepStatus",
    "CrossbootError", "ConfigError", "DownloadError", "ExtractionError",
    "PipelineError", "StepFailure",
]
