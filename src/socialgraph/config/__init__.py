"""
Configuration layer for socialgraph.

Configuration in socialgraph is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
"""

from socialgraph.config.settings import (
    ResolverConfig,
    MutationConfig,
    SocialGraphConfig,
)

__all__ = [
    "ResolverConfig",
    "MutationConfig",
    "SocialGraphConfig",
]
