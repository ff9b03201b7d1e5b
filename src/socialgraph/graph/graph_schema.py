from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional
from uuid import uuid4

EntityKind = Literal["user", "post", "comment"]

USER: EntityKind = "user"
POST: EntityKind = "post"
COMMENT: EntityKind = "comment"

# Relation index edge types (source -> target)
FOLLOWS = "follows"  # user -> user
LIKES = "likes"  # user -> post
HAS_COMMENT = "has_comment"  # post -> comment


def _new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class User:
    """
    A member of the social graph.

    ``followers``/``following`` are not stored here; they are views
    over the ``follows`` relation index.
    """

    id: str
    name: str
    email: str

    @staticmethod
    def create(name: str, email: str) -> "User":
        return User(id=_new_id(), name=name, email=email)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Post:
    """
    Authored content. ``likes`` and ``comments`` live in the relation
    index; only the author reference is stored on the record.
    """

    id: str
    title: str
    content: str
    image_url: Optional[str]
    author_id: str

    @staticmethod
    def create(
        title: str,
        content: str,
        author_id: str,
        image_url: Optional[str] = None,
    ) -> "Post":
        return Post(
            id=_new_id(),
            title=title,
            content=content,
            image_url=image_url,
            author_id=author_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class Comment:
    """
    A comment bound to exactly one post for its lifetime.
    """

    id: str
    content: str
    author_id: str
    post_id: str

    @staticmethod
    def create(content: str, author_id: str, post_id: str) -> "Comment":
        return Comment(
            id=_new_id(),
            content=content,
            author_id=author_id,
            post_id=post_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "content": self.content}
