from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar
import logging
import threading
import time

from socialgraph.config.settings import SocialGraphConfig
from socialgraph.errors import OperationTimeout, RetryableError
from socialgraph.graph.graph_mutator import GraphMutator
from socialgraph.graph.graph_query import GraphResolver
from socialgraph.graph.graph_schema import (
    COMMENT,
    FOLLOWS,
    LIKES,
    POST,
    USER,
)
from socialgraph.graph.graph_store import EntityStore

T = TypeVar("T")

Paths = Optional[Iterable[str]]

logger = logging.getLogger("socialgraph.mutation")


class _CommitTicket:
    """
    Decides exactly once whether a bounded mutation commits or is
    abandoned by a caller that stopped waiting for it.
    """

    def __init__(self, operation: str, timeout_ms: float) -> None:
        self.operation = operation
        self.timeout_ms = timeout_ms
        self.deadline = time.monotonic() + timeout_ms / 1000.0
        self._lock = threading.Lock()
        self._state = "pending"

    def commit(self) -> None:
        with self._lock:
            if self._state == "pending" and time.monotonic() > self.deadline:
                self._state = "abandoned"
            if self._state == "abandoned":
                raise OperationTimeout(self.operation, self.timeout_ms)
            self._state = "committed"

    def abandon(self) -> bool:
        """False if the mutation already committed."""
        with self._lock:
            if self._state == "committed":
                return False
            self._state = "abandoned"
            return True


class SocialGraphService:
    """
    Policy-aware orchestration layer for socialgraph.

    This is the ONLY place where:
    - config is interpreted
    - timeout and retry policies are enforced
    - mutation results are handed to the resolver
    """

    def __init__(
        self,
        *,
        store: EntityStore,
        config: SocialGraphConfig,
    ) -> None:

        self.store = store
        self.config = config

        self.mutator = GraphMutator(store)
        self.resolver = GraphResolver(store, config.resolver)

        self._executor: Optional[ThreadPoolExecutor] = None
        if float(config.mutation.timeout_ms or 0) > 0:
            self._executor = ThreadPoolExecutor(
                max_workers=config.mutation.workers,
                thread_name_prefix="socialgraph-mutation",
            )

    def close(self, wait: bool = False) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    # ===============================================================
    # Queries
    # ===============================================================

    def user(self, user_id: str, paths: Paths = None) -> Dict[str, Any]:
        return self.resolver.resolve(USER, user_id, paths)

    def users(self, paths: Paths = None) -> List[Dict[str, Any]]:
        return self.resolver.resolve_all(USER, paths)

    def post(self, post_id: str, paths: Paths = None) -> Dict[str, Any]:
        return self.resolver.resolve(POST, post_id, paths)

    def posts(self, paths: Paths = None) -> List[Dict[str, Any]]:
        return self.resolver.resolve_all(POST, paths)

    def stats(self) -> Dict[str, int]:
        return {
            "users": self.store.count(USER),
            "posts": self.store.count(POST),
            "comments": self.store.count(COMMENT),
            "follows": self.store.link_count(FOLLOWS),
            "likes": self.store.link_count(LIKES),
        }

    # ===============================================================
    # Mutations
    # ===============================================================

    def add_user(self, name: str, email: str, paths: Paths = None) -> Dict[str, Any]:
        user = self._run(
            "add_user",
            lambda: self.mutator.add_user(name, email),
            idempotent=False,
        )
        return self.resolver.resolve_entity(USER, user, paths)

    def add_post(
        self,
        title: str,
        content: str,
        author_id: str,
        image_url: Optional[str] = None,
        paths: Paths = None,
    ) -> Dict[str, Any]:
        post = self._run(
            "add_post",
            lambda: self.mutator.add_post(
                title=title,
                content=content,
                author_id=author_id,
                image_url=image_url,
            ),
            idempotent=False,
        )
        return self.resolver.resolve_entity(POST, post, paths)

    def like_post(self, post_id: str, user_id: str, paths: Paths = None) -> Dict[str, Any]:
        post = self._run(
            "like_post",
            lambda: self.mutator.like_post(post_id, user_id),
            idempotent=True,
        )
        return self.resolver.resolve_entity(POST, post, paths)

    def add_comment(
        self,
        post_id: str,
        content: str,
        author_id: str,
        paths: Paths = None,
    ) -> Dict[str, Any]:
        comment = self._run(
            "add_comment",
            lambda: self.mutator.add_comment(post_id, content, author_id),
            idempotent=False,
        )
        return self.resolver.resolve_entity(COMMENT, comment, paths)

    def follow_user(
        self,
        follower_id: str,
        following_id: str,
        paths: Paths = None,
    ) -> Dict[str, Any]:
        follower = self._run(
            "follow_user",
            lambda: self.mutator.follow_user(follower_id, following_id),
            idempotent=True,
        )
        return self.resolver.resolve_entity(USER, follower, paths)

    # ===============================================================
    # Policy
    # ===============================================================

    def _run(self, operation: str, fn: Callable[[], T], *, idempotent: bool) -> T:
        policy = self.config.mutation
        attempts = 1 + (policy.max_retries if idempotent else 0)

        for attempt in range(1, attempts + 1):
            try:
                return self._bounded(operation, fn)
            except RetryableError as exc:
                if attempt >= attempts:
                    raise
                logger.warning(
                    "%s attempt %s/%s failed: %s; retrying",
                    operation,
                    attempt,
                    attempts,
                    exc,
                )
                time.sleep(policy.retry_backoff_ms * attempt / 1000.0)

    def _bounded(self, operation: str, fn: Callable[[], T]) -> T:
        timeout_ms = float(self.config.mutation.timeout_ms or 0)
        if timeout_ms <= 0 or self._executor is None:
            return fn()

        ticket = _CommitTicket(operation, timeout_ms)
        fut = self._executor.submit(self._guarded, ticket, fn)
        try:
            return fut.result(timeout=timeout_ms / 1000.0)
        except FutureTimeout:
            if not ticket.abandon():
                # Committed just as the wait expired; the result is final.
                return fut.result()
            fut.cancel()
            raise OperationTimeout(operation, timeout_ms) from None

    def _guarded(self, ticket: _CommitTicket, fn: Callable[[], T]) -> T:
        # Writes made after the caller gave up are rolled back.
        with self.store.atomic(guard=ticket.commit):
            return fn()
