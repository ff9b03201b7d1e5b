from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union

import networkx as nx

from socialgraph.errors import NotFound
from socialgraph.graph.graph_schema import Comment, Post, User

Entity = Union[User, Post, Comment]

logger = logging.getLogger("socialgraph.store")


class EntityStore(ABC):
    """
    Abstract keyed entity storage with a relation index.

    The mutation service and the resolver only ever talk to this
    interface. Concrete stores decide how records are persisted, but
    must honour two atomicity contracts:

    - ``update`` applies its mutate function with no interleaving writer
      on the same entity.
    - ``link`` is an "add to set if absent" primitive.

    Backends with conditional writes may raise
    ``socialgraph.errors.WriteConflict`` from ``link``, ``update`` or
    ``atomic`` when a concurrent writer wins; callers treat it as
    retryable.
    """

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @abstractmethod
    def get(self, kind: str, entity_id: str) -> Optional[Entity]:
        raise NotImplementedError

    @abstractmethod
    def put(self, kind: str, entity: Entity) -> Entity:
        raise NotImplementedError

    @abstractmethod
    def find(
        self,
        kind: str,
        predicate: Optional[Callable[[Entity], bool]] = None,
    ) -> List[Entity]:
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        kind: str,
        entity_id: str,
        mutate: Callable[[Entity], Entity],
    ) -> Entity:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Relation index
    # ------------------------------------------------------------------

    @abstractmethod
    def link(self, relation: str, source_id: str, target_id: str) -> bool:
        """
        Create ``source -[relation]-> target`` if absent.

        Returns True when the edge was created, False if it already
        existed.
        """
        raise NotImplementedError

    @abstractmethod
    def linked(self, relation: str, source_id: str, target_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def targets(self, relation: str, source_id: str) -> List[str]:
        """Ids reachable from ``source_id`` via ``relation``, in link order."""
        raise NotImplementedError

    @abstractmethod
    def sources(self, relation: str, target_id: str) -> List[str]:
        """Ids linking to ``target_id`` via ``relation``, in link order."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    @abstractmethod
    def count(self, kind: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def link_count(self, relation: str) -> int:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(
        self,
        guard: Optional[Callable[[], None]] = None,
    ) -> Iterator["EntityStore"]:
        """
        Group several writes so no other writer observes a partial
        state. Stores without transactions may leave this as a no-op;
        callers then rely on idempotent retry.

        ``guard`` runs after the block body, before the writes become
        final. If it raises, the block fails as if the body had raised.
        """
        yield self
        if guard is not None:
            guard()


class GraphStore(EntityStore):
    """
    Authoritative in-memory store.

    Entities are nodes of a ``networkx.MultiDiGraph``; relationships are
    edges keyed by relation name, so a given (source, target, relation)
    triple exists at most once. Every edge carries a sequence number
    taken from a store-wide counter, which gives relation views a
    stable creation order.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._lock = threading.RLock()
        self._seq = itertools.count()
        self._journal: Optional[List[Tuple[Any, ...]]] = None

    # -------------------- Records --------------------

    def get(self, kind: str, entity_id: str) -> Optional[Entity]:
        with self._lock:
            if entity_id not in self._graph:
                return None
            attrs = self._graph.nodes[entity_id]
            if attrs["kind"] != kind:
                return None
            return attrs["data"]

    def put(self, kind: str, entity: Entity) -> Entity:
        with self._lock:
            if entity.id in self._graph:
                attrs = self._graph.nodes[entity.id]
                self._record("data", entity.id, attrs["data"])
                attrs["data"] = entity
            else:
                self._graph.add_node(
                    entity.id,
                    kind=kind,
                    data=entity,
                    seq=next(self._seq),
                )
                self._record("node", entity.id)
                logger.debug("put %s %s", kind, entity.id)
        return entity

    def find(
        self,
        kind: str,
        predicate: Optional[Callable[[Entity], bool]] = None,
    ) -> List[Entity]:
        with self._lock:
            rows = [
                (attrs["seq"], attrs["data"])
                for _, attrs in self._graph.nodes(data=True)
                if attrs["kind"] == kind
            ]
        rows.sort(key=lambda row: row[0])
        return [
            entity for _, entity in rows
            if predicate is None or predicate(entity)
        ]

    def update(
        self,
        kind: str,
        entity_id: str,
        mutate: Callable[[Entity], Entity],
    ) -> Entity:
        with self._lock:
            current = self.get(kind, entity_id)
            if current is None:
                raise NotFound(kind, entity_id)
            updated = mutate(current)
            if updated.id != entity_id:
                raise ValueError("update must not change entity id")
            return self.put(kind, updated)

    # -------------------- Relation index --------------------

    def link(self, relation: str, source_id: str, target_id: str) -> bool:
        with self._lock:
            for node_id in (source_id, target_id):
                if node_id not in self._graph:
                    raise NotFound("entity", node_id)
            if self._graph.has_edge(source_id, target_id, key=relation):
                return False
            self._graph.add_edge(
                source_id,
                target_id,
                key=relation,
                seq=next(self._seq),
            )
            self._record("edge", source_id, target_id, relation)
        logger.debug("link %s %s -> %s", relation, source_id, target_id)
        return True

    def linked(self, relation: str, source_id: str, target_id: str) -> bool:
        with self._lock:
            return self._graph.has_edge(source_id, target_id, key=relation)

    def targets(self, relation: str, source_id: str) -> List[str]:
        with self._lock:
            if source_id not in self._graph:
                return []
            rows = [
                (seq, v)
                for _, v, key, seq in self._graph.out_edges(
                    source_id, keys=True, data="seq"
                )
                if key == relation
            ]
        return [v for _, v in sorted(rows)]

    def sources(self, relation: str, target_id: str) -> List[str]:
        with self._lock:
            if target_id not in self._graph:
                return []
            rows = [
                (seq, u)
                for u, _, key, seq in self._graph.in_edges(
                    target_id, keys=True, data="seq"
                )
                if key == relation
            ]
        return [u for _, u in sorted(rows)]

    # -------------------- Analytics --------------------

    def count(self, kind: str) -> int:
        with self._lock:
            return sum(
                1 for _, k in self._graph.nodes(data="kind") if k == kind
            )

    def link_count(self, relation: str) -> int:
        with self._lock:
            return sum(1 for _, _, key in self._graph.edges(keys=True) if key == relation)

    # -------------------- Transactions --------------------

    @contextmanager
    def atomic(
        self,
        guard: Optional[Callable[[], None]] = None,
    ) -> Iterator["GraphStore"]:
        """
        Hold the store lock for the whole block and undo every write made
        inside it if the block raises or ``guard`` rejects the commit.
        """
        with self._lock:
            if self._journal is not None:
                # Nested: the outermost block owns the journal.
                yield self
                if guard is not None:
                    guard()
                return

            self._journal = []
            try:
                yield self
                if guard is not None:
                    guard()
            except BaseException:
                self._rollback(self._journal)
                raise
            finally:
                self._journal = None

    def _record(self, *entry: Any) -> None:
        if self._journal is not None:
            self._journal.append(entry)

    def _rollback(self, journal: List[Tuple[Any, ...]]) -> None:
        for entry in reversed(journal):
            op = entry[0]
            if op == "node":
                self._graph.remove_node(entry[1])
            elif op == "edge":
                _, source_id, target_id, relation = entry
                self._graph.remove_edge(source_id, target_id, key=relation)
            elif op == "data":
                self._graph.nodes[entry[1]]["data"] = entry[2]
        if journal:
            logger.warning("rolled back %s uncommitted writes", len(journal))

