"""
Input surfaces: file pick, drag-and-drop and clipboard paste.

All three produce CandidateFile lists that go through the same admission
path (validation, then capacity bound).
"""
import logging
import mimetypes
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..errors import ValidationError
from ..models import FROM_CONFIG, CandidateFile, UploadConfig
from .models import Admission

logger = logging.getLogger(__name__)

DropItem = Union[CandidateFile, Path, str]


@dataclass(frozen=True)
class ClipboardItem:
    """One item of a paste event. Only image/* items are considered."""
    mime_type: str
    data: bytes = field(repr=False)
    name: Optional[str] = None


_IMAGE_MIMES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def _guess_type(path: Path) -> str:
    known = _IMAGE_MIMES.get(path.suffix.lower())
    if known:
        return known
    mimetype, _ = mimetypes.guess_type(str(path))
    return mimetype or "application/octet-stream"


def _read_candidate(path: Path, origin: str) -> CandidateFile:
    path = Path(path)
    content_type = _guess_type(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        # Rejected at admission; siblings in the batch still go through
        logger.warning(f"Cannot read {path}: {exc}")
        reason = exc.strerror or type(exc).__name__
        return CandidateFile(
            name=path.name,
            content_type=content_type,
            data=b"",
            origin=origin,
            read_error=f"cannot read file ({reason})",
        )
    return CandidateFile(name=path.name, content_type=content_type, data=data, origin=origin)


class InputSurfaceAdapter:
    """Normalizes input events into validated, capacity-bounded candidates."""

    def __init__(self, config: Optional[UploadConfig] = None):
        self._config = config or UploadConfig()

    def pick(self, paths: Iterable[Union[Path, str]]) -> List[CandidateFile]:
        """Files chosen through an explicit file picker."""
        return [_read_candidate(Path(p), "pick") for p in paths]

    def drop(self, items: Iterable[DropItem]) -> List[CandidateFile]:
        """Files dropped onto the drop target."""
        files = []
        for item in items:
            if isinstance(item, CandidateFile):
                files.append(replace(item, origin="drop"))
            else:
                files.append(_read_candidate(Path(item), "drop"))
        return files

    def paste(self, items: Iterable[ClipboardItem]) -> List[CandidateFile]:
        """Image items of a clipboard paste; non-image items are ignored."""
        files = []
        for item in items:
            mime_type = (item.mime_type or "").lower()
            if not mime_type.startswith("image/"):
                continue
            name = item.name
            if not name:
                extension = mime_type.split("/", 1)[1] or "png"
                name = f"pasted-{int(time.time() * 1000)}.{extension}"
            files.append(CandidateFile(name=name, content_type=mime_type, data=item.data, origin="paste"))
        return files

    def validate(self, candidate: CandidateFile) -> None:
        """
        Check one candidate against the type allow-list and size ceiling.

        Raises:
            ValidationError: if the candidate cannot be uploaded
        """
        if candidate.read_error:
            raise ValidationError(candidate.name, candidate.read_error)
        if not self._config.is_allowed_type(candidate.content_type):
            raise ValidationError(candidate.name, f"unsupported file type {candidate.content_type}")
        if candidate.size == 0:
            raise ValidationError(candidate.name, "file is empty")
        if candidate.size > self._config.max_file_bytes:
            limit_mb = self._config.max_file_bytes / (1024 * 1024)
            raise ValidationError(candidate.name, f"file exceeds {limit_mb:.1f} MB")

    def admit(
        self,
        candidates: Sequence[CandidateFile],
        current_length: int,
        max_items: Optional[int] = FROM_CONFIG,
    ) -> Admission:
        """
        Validate candidates, then admit as many as remaining capacity allows.

        Submission order is preserved. Candidates beyond capacity are counted
        as dropped, not reported individually. A ``max_items`` of None admits
        every valid candidate.
        """
        if max_items is FROM_CONFIG:
            max_items = self._config.max_items
        admission = Admission()

        valid = []
        for candidate in candidates:
            try:
                self.validate(candidate)
            except ValidationError as exc:
                logger.warning(f"Rejected {candidate.name}: {exc.reason}")
                admission.rejected.append(exc)
                continue
            valid.append(candidate)

        if max_items is None:
            admission.admitted = valid
        else:
            admission.admitted = valid[:max(max_items - current_length, 0)]
        admission.dropped = len(valid) - len(admission.admitted)
        if admission.dropped:
            logger.info(f"Capacity reached: dropped {admission.dropped} file(s) beyond {max_items}")
        return admission
