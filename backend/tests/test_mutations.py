import threading

import pytest

from socialgraph.errors import NotFound, ValidationError
from socialgraph.graph.graph_schema import COMMENT, FOLLOWS, HAS_COMMENT, LIKES, POST


def test_add_user_is_not_idempotent(mutator, store):
    first = mutator.add_user("Alice", "a@x.com")
    second = mutator.add_user("Alice", "a@x.com")

    assert first.id != second.id
    assert store.count("user") == 2


def test_add_post_requires_existing_author(mutator, store):
    with pytest.raises(NotFound):
        mutator.add_post(title="T", content="C", author_id="ghost")

    assert store.count(POST) == 0


def test_add_post_rejects_missing_fields(mutator):
    alice = mutator.add_user("Alice", "a@x.com")

    with pytest.raises(ValidationError):
        mutator.add_post(title=None, content="C", author_id=alice.id)
    with pytest.raises(ValidationError):
        mutator.add_post(title="T", content="C", author_id="")
    with pytest.raises(ValidationError):
        mutator.add_user("Bob", None)


def test_like_is_idempotent(mutator, store):
    alice = mutator.add_user("Alice", "a@x.com")
    bob = mutator.add_user("Bob", "b@x.com")
    post = mutator.add_post(title="T", content="C", author_id=alice.id)

    mutator.like_post(post.id, bob.id)
    mutator.like_post(post.id, bob.id)

    assert store.sources(LIKES, post.id) == [bob.id]


def test_like_requires_both_ids(mutator):
    alice = mutator.add_user("Alice", "a@x.com")
    post = mutator.add_post(title="T", content="C", author_id=alice.id)

    with pytest.raises(NotFound):
        mutator.like_post(post.id, "ghost")
    with pytest.raises(NotFound):
        mutator.like_post("ghost", alice.id)


def test_follow_is_idempotent_and_symmetric(mutator, store):
    alice = mutator.add_user("Alice", "a@x.com")
    bob = mutator.add_user("Bob", "b@x.com")

    mutator.follow_user(alice.id, bob.id)
    once = (store.targets(FOLLOWS, alice.id), store.sources(FOLLOWS, bob.id))
    mutator.follow_user(alice.id, bob.id)
    twice = (store.targets(FOLLOWS, alice.id), store.sources(FOLLOWS, bob.id))

    assert once == twice == ([bob.id], [alice.id])
    # Direction matters: Bob does not follow Alice.
    assert store.targets(FOLLOWS, bob.id) == []
    assert store.sources(FOLLOWS, alice.id) == []


def test_follow_unknown_user_writes_nothing(mutator, store):
    alice = mutator.add_user("Alice", "a@x.com")

    with pytest.raises(NotFound):
        mutator.follow_user(alice.id, "ghost")

    assert store.link_count(FOLLOWS) == 0


def test_add_comment_appends_in_creation_order(mutator, store):
    alice = mutator.add_user("Alice", "a@x.com")
    bob = mutator.add_user("Bob", "b@x.com")
    post = mutator.add_post(title="T", content="C", author_id=alice.id)

    first = mutator.add_comment(post.id, "hi", bob.id)
    assert store.targets(HAS_COMMENT, post.id) == [first.id]

    second = mutator.add_comment(post.id, "again", alice.id)
    assert store.targets(HAS_COMMENT, post.id) == [first.id, second.id]

    assert first.author_id == bob.id
    assert first.post_id == post.id


def test_add_comment_validates_before_writing(mutator, store):
    alice = mutator.add_user("Alice", "a@x.com")
    post = mutator.add_post(title="T", content="C", author_id=alice.id)

    with pytest.raises(NotFound):
        mutator.add_comment(post.id, "hi", "ghost")
    with pytest.raises(NotFound):
        mutator.add_comment("ghost", "hi", alice.id)

    assert store.count(COMMENT) == 0
    assert store.targets(HAS_COMMENT, post.id) == []


def test_concurrent_likes_lose_no_update(mutator, store):
    author = mutator.add_user("Author", "author@x.com")
    post = mutator.add_post(title="T", content="C", author_id=author.id)
    fans = [mutator.add_user(f"Fan{i}", f"fan{i}@x.com") for i in range(20)]

    barrier = threading.Barrier(len(fans) * 2)

    def like(user_id):
        barrier.wait()
        mutator.like_post(post.id, user_id)

    threads = [
        threading.Thread(target=like, args=(fan.id,))
        for fan in fans
        for _ in range(2)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    likes = store.sources(LIKES, post.id)
    assert len(likes) == len(fans)
    assert set(likes) == {fan.id for fan in fans}
