"""Classification oracle client."""

from .client import ClassificationClient, ClassificationVerdict

__all__ = ["ClassificationClient", "ClassificationVerdict"]
