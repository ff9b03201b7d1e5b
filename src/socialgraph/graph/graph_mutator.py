from __future__ import annotations

import logging
from typing import Optional

from socialgraph.graph.consistency import ConsistencyEnforcer
from socialgraph.graph.graph_schema import (
    COMMENT,
    FOLLOWS,
    HAS_COMMENT,
    LIKES,
    POST,
    USER,
    Comment,
    Post,
    User,
)
from socialgraph.graph.graph_store import EntityStore

logger = logging.getLogger("socialgraph.mutation")


class GraphMutator:
    """
    Applies create/like/follow/comment operations to the entity store.

    Every reference is validated before the first write. Relationship
    sets are written through ``EntityStore.link`` so repeated calls
    converge on the same state.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self.rules = ConsistencyEnforcer(store)

    # ------------------------------------------------------------------
    # Entity creation
    # ------------------------------------------------------------------

    def add_user(self, name: str, email: str) -> User:
        name = self.rules.require_text("name", name)
        email = self.rules.require_text("email", email)

        user = User.create(name=name, email=email)
        self.store.put(USER, user)
        logger.info("add_user id=%s", user.id)
        return user

    def add_post(
        self,
        title: str,
        content: str,
        author_id: str,
        image_url: Optional[str] = None,
    ) -> Post:
        title = self.rules.require_text("title", title)
        content = self.rules.require_text("content", content)
        image_url = self.rules.optional_text("imageUrl", image_url)
        author_id = self.rules.require_id("authorId", author_id)

        with self.store.atomic():
            self.rules.require_exists(USER, author_id)
            post = Post.create(
                title=title,
                content=content,
                author_id=author_id,
                image_url=image_url,
            )
            self.store.put(POST, post)

        logger.info("add_post id=%s author=%s", post.id, author_id)
        return post

    def add_comment(self, post_id: str, content: str, author_id: str) -> Comment:
        post_id = self.rules.require_id("postId", post_id)
        content = self.rules.require_text("content", content)
        author_id = self.rules.require_id("authorId", author_id)

        # Insert and append commit together: no orphan comment is visible.
        with self.store.atomic():
            self.rules.require_exists(POST, post_id)
            self.rules.require_exists(USER, author_id)

            comment = Comment.create(
                content=content,
                author_id=author_id,
                post_id=post_id,
            )
            self.store.put(COMMENT, comment)
            self.store.link(HAS_COMMENT, post_id, comment.id)

            self.rules.assert_comment_ownership(comment.id, post_id)

        logger.info("add_comment id=%s post=%s author=%s", comment.id, post_id, author_id)
        return comment

    # ------------------------------------------------------------------
    # Relationship sets
    # ------------------------------------------------------------------

    def like_post(self, post_id: str, user_id: str) -> Post:
        post_id = self.rules.require_id("postId", post_id)
        user_id = self.rules.require_id("userId", user_id)

        post = self.rules.require_exists(POST, post_id)
        self.rules.require_exists(USER, user_id)

        if self.rules.is_linked(LIKES, user_id, post_id):
            logger.info("like_post post=%s user=%s already liked", post_id, user_id)
            return post

        created = self.store.link(LIKES, user_id, post_id)
        logger.info("like_post post=%s user=%s created=%s", post_id, user_id, created)
        return post

    def follow_user(self, follower_id: str, following_id: str) -> User:
        follower_id = self.rules.require_id("followerId", follower_id)
        following_id = self.rules.require_id("followingId", following_id)

        follower = self.rules.require_exists(USER, follower_id)
        self.rules.require_exists(USER, following_id)

        if self.rules.is_linked(FOLLOWS, follower_id, following_id):
            logger.info(
                "follow_user follower=%s following=%s already linked",
                follower_id,
                following_id,
            )
        else:
            self.store.link(FOLLOWS, follower_id, following_id)
            logger.info(
                "follow_user follower=%s following=%s",
                follower_id,
                following_id,
            )

        self.rules.assert_follow_symmetry(follower_id, following_id)
        return follower
