from __future__ import annotations
from typing import Optional


class BackendInitError(RuntimeError):
    """
    Raised when a compute backend cannot be brought up: no device,
    requested backend unavailable, or the kernel program fails to build.
    """


class GenerationError(RuntimeError):
    """
    A single frame generation failed while dispatching to or reading back
    from the compute backend. Carries the sequence number of the job.
    """

    def __init__(self, message: str, seq: Optional[int] = None) -> None:
        super().__init__(message)
        self.seq = seq

    def __reduce__(self):
        return (GenerationError, (str(self), self.seq))
