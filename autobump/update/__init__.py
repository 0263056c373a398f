"""Image update decision and reconciliation."""

from .image import ImageReference, parse_image_reference
from .policy import Action, UpdateDecision, decide
from .reconciler import ReconcileOutcome, UpdateReconciler, UpdateRequest
from .version import SemVer, compare_versions, parse_version

__all__ = [
    # image
    "ImageReference",
    "parse_image_reference",
    # policy
    "Action",
    "UpdateDecision",
    "decide",
    # reconciler
    "ReconcileOutcome",
    "UpdateReconciler",
    "UpdateRequest",
    # version
    "SemVer",
    "compare_versions",
    "parse_version",
]
