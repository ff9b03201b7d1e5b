import threading

import pytest

from backend.app.services.social_graph_service import SocialGraphService
from socialgraph.errors import OperationTimeout, WriteConflict
from socialgraph.graph.graph_schema import COMMENT, FOLLOWS, HAS_COMMENT, LIKES, USER
from socialgraph.graph.graph_store import GraphStore

from conftest import make_config


class FlakyStore(GraphStore):
    """Fails the first ``failures`` link calls with a write conflict."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.link_calls = 0

    def link(self, relation, source_id, target_id):
        self.link_calls += 1
        if self.link_calls <= self.failures:
            raise WriteConflict(f"{relation} {source_id} -> {target_id}")
        return super().link(relation, source_id, target_id)


class SlowStore(GraphStore):
    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def link(self, relation, source_id, target_id):
        self.release.wait(timeout=2)
        return super().link(relation, source_id, target_id)


class GatedPutStore(GraphStore):
    """Holds ``put`` calls until released once ``gated`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.gated = False
        self.release = threading.Event()

    def put(self, kind, entity):
        if self.gated:
            self.release.wait(timeout=2)
        return super().put(kind, entity)


def test_follow_retries_to_completion_after_write_conflict():
    store = FlakyStore(failures=2)
    service = SocialGraphService(store=store, config=make_config(max_retries=3))
    alice = service.add_user("Alice", "a@x.com")
    bob = service.add_user("Bob", "b@x.com")

    result = service.follow_user(alice["id"], bob["id"], paths=["following"])

    assert [u["id"] for u in result["following"]] == [bob["id"]]
    assert store.sources(FOLLOWS, bob["id"]) == [alice["id"]]
    assert store.link_calls == 3


def test_retries_are_bounded():
    store = FlakyStore(failures=10)
    service = SocialGraphService(store=store, config=make_config(max_retries=2))
    alice = service.add_user("Alice", "a@x.com")
    post = service.add_post("T", "C", author_id=alice["id"])

    with pytest.raises(WriteConflict):
        service.like_post(post["id"], alice["id"])

    assert store.link_calls == 3
    assert store.link_count(LIKES) == 0


def test_failed_comment_is_rolled_back_and_not_retried():
    store = FlakyStore(failures=1)
    service = SocialGraphService(store=store, config=make_config(max_retries=3))
    alice = service.add_user("Alice", "a@x.com")
    post = service.add_post("T", "C", author_id=alice["id"])

    with pytest.raises(WriteConflict):
        service.add_comment(post["id"], "hi", alice["id"])

    assert store.link_calls == 1
    assert store.count(COMMENT) == 0


def test_timed_out_follow_is_retryable_and_rolled_back():
    store = SlowStore()
    service = SocialGraphService(
        store=store,
        config=make_config(timeout_ms=50, max_retries=0),
    )
    try:
        alice = service.add_user("Alice", "a@x.com")
        bob = service.add_user("Bob", "b@x.com")

        with pytest.raises(OperationTimeout) as excinfo:
            service.follow_user(alice["id"], bob["id"])
        assert excinfo.value.extensions == {"code": "TIMEOUT"}
    finally:
        store.release.set()
        service.close(wait=True)

    assert store.link_count(FOLLOWS) == 0
    assert store.targets(FOLLOWS, alice["id"]) == []


def test_timed_out_comment_never_commits():
    store = SlowStore()
    service = SocialGraphService(
        store=store,
        config=make_config(timeout_ms=50, max_retries=0),
    )
    try:
        alice = service.add_user("Alice", "a@x.com")
        post = service.add_post("T", "C", author_id=alice["id"])

        with pytest.raises(OperationTimeout):
            service.add_comment(post["id"], "hi", alice["id"])
    finally:
        store.release.set()
        service.close(wait=True)

    assert store.count(COMMENT) == 0
    assert store.targets(HAS_COMMENT, post["id"]) == []


def test_timed_out_create_leaves_no_entity():
    store = GatedPutStore()
    service = SocialGraphService(
        store=store,
        config=make_config(timeout_ms=50, max_retries=0),
    )
    store.gated = True
    try:
        with pytest.raises(OperationTimeout):
            service.add_user("Alice", "a@x.com")
    finally:
        store.release.set()
        service.close(wait=True)

    assert store.count(USER) == 0


def test_bounded_mutation_within_timeout_commits():
    store = GraphStore()
    service = SocialGraphService(
        store=store,
        config=make_config(timeout_ms=2000),
    )
    try:
        alice = service.add_user("Alice", "a@x.com")
        post = service.add_post("T", "C", author_id=alice["id"])
        comment = service.add_comment(post["id"], "hi", alice["id"])
    finally:
        service.close(wait=True)

    assert store.targets(HAS_COMMENT, post["id"]) == [comment["id"]]
    assert store.count(USER) == 1


def test_stats_counts_entities_and_links(service):
    alice = service.add_user("Alice", "a@x.com")
    bob = service.add_user("Bob", "b@x.com")
    service.follow_user(alice["id"], bob["id"])
    post = service.add_post("T", "C", author_id=alice["id"])
    service.like_post(post["id"], bob["id"])
    service.add_comment(post["id"], "hi", bob["id"])

    assert service.stats() == {
        "users": 2,
        "posts": 1,
        "comments": 1,
        "follows": 1,
        "likes": 1,
    }
