"""Exception types raised by the bootstrap engine.

One class per failure domain, all rooted at CrossbootError so the CLI can
report any of them uniformly and exit non-zero.
"""


class CrossbootError(Exception):
    pass


class DownloadError(CrossbootError):
    """A fetch did not produce a complete file. The destination is absent."""


class ExtractionError(CrossbootError):
    """An archive could not be listed or unpacked."""


class PipelineError(CrossbootError):
    """The declared steps do not form a valid dependency graph."""


class ConfigError(CrossbootError):
    pass


class StepFailure(CrossbootError):
    """A step body reported failure. Always fatal to the pipeline."""

    def __init__(self, step: str, reason: str = ""):
        self.step = step
        self.reason = reason
        msg = f"step {step!r} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
