from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------
# Graph resolution
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ResolverConfig:
    """
    Controls how far a single resolution pass may expand references.
    """

    max_depth: int = 6


# ---------------------------------------------------------------------
# Mutation policy
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MutationConfig:
    """
    Timeout and retry policy applied to every mutation.

    ``timeout_ms`` of 0 runs mutations inline with no bound. Only
    idempotent mutations are retried.
    """

    timeout_ms: float = 5000.0
    max_retries: int = 3
    retry_backoff_ms: float = 50.0
    workers: int = 4


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class SocialGraphConfig:
    """
    Root configuration object for socialgraph.

    Constructed once at process start and passed explicitly to the
    services that need it.
    """

    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    mutation: MutationConfig = field(default_factory=MutationConfig)
