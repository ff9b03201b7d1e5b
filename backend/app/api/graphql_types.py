from typing import Any, Callable, Dict, List, Optional, TypeVar

import strawberry

T = TypeVar("T")


@strawberry.type
class User:
    id: strawberry.ID
    name: Optional[str]
    email: Optional[str]
    posts: Optional[List["Post"]] = None
    followers: Optional[List["User"]] = None
    following: Optional[List["User"]] = None


@strawberry.type
class Post:
    id: strawberry.ID
    title: Optional[str]
    content: Optional[str]
    image_url: Optional[str]
    author: Optional[User] = None
    likes: Optional[List[User]] = None
    comments: Optional[List["Comment"]] = None


@strawberry.type
class Comment:
    id: strawberry.ID
    content: Optional[str]
    author: Optional[User] = None
    post: Optional[Post] = None


# ---------------------------------------------------------------------
# Resolved graph -> GraphQL objects
# ---------------------------------------------------------------------


def _one(convert: Callable[[Dict[str, Any]], T], data: Optional[Dict[str, Any]]) -> Optional[T]:
    return None if data is None else convert(data)


def _many(convert: Callable[[Dict[str, Any]], T], data: Optional[List[Dict[str, Any]]]) -> Optional[List[T]]:
    return None if data is None else [convert(item) for item in data]


def to_user(data: Dict[str, Any]) -> User:
    return User(
        id=strawberry.ID(data["id"]),
        name=data["name"],
        email=data["email"],
        posts=_many(to_post, data.get("posts")),
        followers=_many(to_user, data.get("followers")),
        following=_many(to_user, data.get("following")),
    )


def to_post(data: Dict[str, Any]) -> Post:
    return Post(
        id=strawberry.ID(data["id"]),
        title=data["title"],
        content=data["content"],
        image_url=data["image_url"],
        author=_one(to_user, data.get("author")),
        likes=_many(to_user, data.get("likes")),
        comments=_many(to_comment, data.get("comments")),
    )


def to_comment(data: Dict[str, Any]) -> Comment:
    return Comment(
        id=strawberry.ID(data["id"]),
        content=data["content"],
        author=_one(to_user, data.get("author")),
        post=_one(to_post, data.get("post")),
    )
