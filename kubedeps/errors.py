"""Error taxonomy for dependency discovery.

MalformedWorkloadError -- object could not be converted to its typed form;
                          fatal for that object only.
ClusterQueryError      -- the Service list read failed; the caller owns
                          retry and backoff.
UnsupportedKindError   -- no extractor is registered for the object's kind;
                          benign, means "not applicable".
"""

from __future__ import annotations


class DependencyError(Exception):
    """Base class for every discovery failure."""


class MalformedWorkloadError(DependencyError):
    """Raised when a generic object cannot be converted to a typed workload."""

    def __init__(self, kind: str, reason: str) -> None:
        super().__init__(f"failed to convert {kind} from unstructured object: {reason}")
        self.kind = kind
        self.reason = reason


class ClusterQueryError(DependencyError):
    """Raised when listing Services in a namespace fails."""

    def __init__(self, namespace: str, reason: str) -> None:
        super().__init__(f"failed to list services in namespace '{namespace}': {reason}")
        self.namespace = namespace
        self.reason = reason


class UnsupportedKindError(DependencyError):
    """Raised when discovery is requested for a kind with no extractor."""

    def __init__(self, kind: object) -> None:
        super().__init__(f"no dependency extractor registered for {kind}")
        self.kind = kind
