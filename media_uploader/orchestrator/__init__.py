"""Orchestrator package - coordinates batch upload workflows."""
from .core import UploadOrchestrator
from .input_surface import ClipboardItem, InputSurfaceAdapter
from .metadata import MetadataBinding
from .models import Admission, TaskState, UploadTask
from .pipeline import UploadPipeline
from .reconciler import ListReconciler

__all__ = [
    "UploadOrchestrator",
    "ClipboardItem",
    "InputSurfaceAdapter",
    "MetadataBinding",
    "Admission",
    "TaskState",
    "UploadTask",
    "UploadPipeline",
    "ListReconciler",
]
