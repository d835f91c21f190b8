"""
Models for media_uploader module.

Immutable dataclasses; the bound list is a tuple of entries and is only ever
replaced, never mutated in place.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
from enum import Enum


DEFAULT_ALLOWED_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)


class UploadStatus(Enum):
    """Upload operation status."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class MediaResource:
    """Reference to an object in external storage. Identity is the key."""
    key: str
    url: str = field(compare=False)

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "url": self.url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaResource":
        return cls(key=str(data["key"]), url=str(data.get("url") or ""))


@dataclass(frozen=True)
class Annotation:
    """Free-text fields attached to a resolved image."""
    title: str = ""
    analysis: str = ""


@dataclass(frozen=True)
class Placeholder:
    """Transient stand-in for an in-flight upload. Never persisted."""
    id: str

    @classmethod
    def new(cls) -> "Placeholder":
        return cls(id=uuid.uuid4().hex)

    @property
    def key(self) -> str:
        return self.id


@dataclass(frozen=True)
class Resolved:
    """Uploaded image, optionally carrying an annotation."""
    image: MediaResource
    annotation: Optional[Annotation] = None

    @property
    def key(self) -> str:
        return self.image.key

    @property
    def url(self) -> str:
        return self.image.url

    def to_dict(self) -> Dict[str, Any]:
        if self.annotation is None:
            return self.image.to_dict()
        return {
            "image": self.image.to_dict(),
            "title": self.annotation.title,
            "analysis": self.annotation.analysis,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resolved":
        if "image" in data:
            return cls(
                image=MediaResource.from_dict(data["image"]),
                annotation=Annotation(
                    title=str(data.get("title") or ""),
                    analysis=str(data.get("analysis") or ""),
                ),
            )
        return cls(image=MediaResource.from_dict(data))


MediaEntry = Union[Placeholder, Resolved]
MediaList = Tuple[MediaEntry, ...]


def entries_to_list(entries: Iterable[MediaEntry]) -> List[Dict[str, Any]]:
    """Serialize resolved entries; placeholders are skipped."""
    return [entry.to_dict() for entry in entries if isinstance(entry, Resolved)]


def entries_from_list(data: Iterable[Dict[str, Any]]) -> MediaList:
    return tuple(Resolved.from_dict(item) for item in data)


@dataclass(frozen=True)
class CandidateFile:
    """A user-supplied file waiting for admission."""
    name: str
    content_type: str
    data: bytes = field(repr=False)
    origin: str = "pick"  # pick | drop | paste
    read_error: Optional[str] = None  # set when the source could not be read

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadTarget:
    """One-time upload credential issued by the backend."""
    upload_url: str
    storage_key: str


@dataclass(frozen=True)
class UploadResult:
    """Immutable outcome of one file pipeline."""
    filename: str
    status: UploadStatus = UploadStatus.SUCCESS
    entry: Optional[Resolved] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == UploadStatus.SUCCESS

    @classmethod
    def ok(cls, filename: str, entry: Resolved):
        return cls(filename=filename, status=UploadStatus.SUCCESS, entry=entry)

    @classmethod
    def fail(cls, filename: str, error: str):
        return cls(filename=filename, status=UploadStatus.FAILED, error=error)


@dataclass(frozen=True)
class BatchResult:
    """Summary of one settled batch. Per-item diagnostics are not kept."""
    admitted: int
    added: Tuple[Resolved, ...] = ()
    failed: int = 0
    dropped: int = 0
    rejected: Tuple[Any, ...] = ()  # ValidationError instances
    message: Optional[str] = None

    @property
    def all_success(self) -> bool:
        return self.failed == 0 and not self.rejected


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for batch uploads."""
    max_items: Optional[int] = 5  # None: uncapped
    allowed_types: Tuple[str, ...] = DEFAULT_ALLOWED_TYPES
    max_file_bytes: int = 10 * 1024 * 1024
    compress: bool = True
    compress_max_bytes: int = 1024 * 1024
    compress_max_edge: int = 1920
    max_concurrency: Optional[int] = None  # None: derived from file sizes
    discard_removed_uploads: bool = False
    upload_url_path: str = "image/upload-url"
    annotated: bool = False

    def is_allowed_type(self, content_type: str) -> bool:
        return content_type.lower() in self.allowed_types


# Marks "take the value from UploadConfig" where None is itself meaningful
FROM_CONFIG: Any = object()
