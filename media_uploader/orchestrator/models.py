"""Orchestrator data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..errors import ValidationError
from ..models import CandidateFile, Placeholder, UploadResult, UploadTarget


class TaskState(Enum):
    """Lifecycle of one file pipeline."""
    PENDING = "pending"
    COMPRESSING = "compressing"
    REQUESTING_CREDENTIAL = "requesting_credential"
    TRANSFERRING = "transferring"
    RESOLVING = "resolving"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def settled(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED)


@dataclass
class UploadTask:
    """Task for one admitted file. Lives only for the duration of its batch."""
    index: int
    source: CandidateFile
    placeholder: Placeholder
    state: TaskState = TaskState.PENDING
    payload: Optional[CandidateFile] = None
    target: Optional[UploadTarget] = None
    result: Optional[UploadResult] = None

    @property
    def filename(self) -> str:
        return self.source.name


@dataclass
class Admission:
    """Outcome of validating and capacity-bounding one batch of candidates."""
    admitted: List[CandidateFile] = field(default_factory=list)
    rejected: List[ValidationError] = field(default_factory=list)
    dropped: int = 0

    @property
    def rejected_tuple(self) -> Tuple[ValidationError, ...]:
        return tuple(self.rejected)
