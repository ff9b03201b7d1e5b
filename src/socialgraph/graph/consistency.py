from __future__ import annotations

from typing import Optional

from socialgraph.errors import ConsistencyError, NotFound, ValidationError
from socialgraph.graph.graph_schema import COMMENT, FOLLOWS, HAS_COMMENT
from socialgraph.graph.graph_store import Entity, EntityStore


class ConsistencyEnforcer:
    """
    Stateless rule set guarding referential integrity and relationship
    symmetry.

    Every relationship is binary per ordered pair: linked or not linked.
    The mutator moves pairs into "linked" and never back.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Input rules
    # ------------------------------------------------------------------

    @staticmethod
    def require_text(field: str, value: object) -> str:
        if value is None:
            raise ValidationError(f"{field} is required")
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        return value

    @staticmethod
    def require_id(field: str, value: object) -> str:
        value = ConsistencyEnforcer.require_text(field, value)
        if not value.strip():
            raise ValidationError(f"{field} must not be blank")
        return value

    @staticmethod
    def optional_text(field: str, value: object) -> Optional[str]:
        if value is None:
            return None
        return ConsistencyEnforcer.require_text(field, value)

    # ------------------------------------------------------------------
    # Pre-write rules
    # ------------------------------------------------------------------

    def require_exists(self, kind: str, entity_id: str) -> Entity:
        entity = self.store.get(kind, entity_id)
        if entity is None:
            raise NotFound(kind, entity_id)
        return entity

    def is_linked(self, relation: str, source_id: str, target_id: str) -> bool:
        """Membership check run before inserting into a relationship set."""
        return self.store.linked(relation, source_id, target_id)

    # ------------------------------------------------------------------
    # Post-write assertions
    # ------------------------------------------------------------------

    def assert_follow_symmetry(self, follower_id: str, following_id: str) -> None:
        in_following = following_id in self.store.targets(FOLLOWS, follower_id)
        in_followers = follower_id in self.store.sources(FOLLOWS, following_id)
        if in_following != in_followers:
            raise ConsistencyError(
                f"asymmetric follow between {follower_id} and {following_id}"
            )
        if not in_following:
            raise ConsistencyError(
                f"follow {follower_id} -> {following_id} was not recorded"
            )

    def assert_comment_ownership(self, comment_id: str, post_id: str) -> None:
        comment = self.require_exists(COMMENT, comment_id)
        if comment.post_id != post_id:
            raise ConsistencyError(
                f"comment {comment_id} belongs to {comment.post_id}, not {post_id}"
            )
        owners = self.store.sources(HAS_COMMENT, comment_id)
        if owners != [post_id]:
            raise ConsistencyError(
                f"comment {comment_id} is listed under posts {owners}"
            )
