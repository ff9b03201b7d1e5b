from __future__ import annotations

from typing import Any, Dict


class SocialGraphError(Exception):
    """
    Base error for the social graph engine.

    Carries a stable ``code`` which the API layer exposes to callers
    through GraphQL error ``extensions``.
    """

    code: str = "SOCIAL_GRAPH_ERROR"

    @property
    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code}


class NotFound(SocialGraphError):
    """Referenced id does not resolve to an existing entity."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class ValidationError(SocialGraphError):
    """Required field missing or malformed."""

    code = "VALIDATION_ERROR"


class ConsistencyError(SocialGraphError):
    """A link would violate, or has violated, a graph invariant."""

    code = "CONSISTENCY_ERROR"


class RetryableError(SocialGraphError):
    """Transient failure; repeating the operation is safe."""

    code = "RETRYABLE"


class OperationTimeout(RetryableError):
    code = "TIMEOUT"

    def __init__(self, operation: str, timeout_ms: float) -> None:
        super().__init__(f"{operation} timed out after {timeout_ms:.0f}ms")
        self.operation = operation
        self.timeout_ms = timeout_ms


class WriteConflict(RetryableError):
    code = "WRITE_CONFLICT"
