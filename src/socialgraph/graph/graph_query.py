from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from socialgraph.config.settings import ResolverConfig
from socialgraph.errors import NotFound, ValidationError
from socialgraph.graph.graph_schema import (
    COMMENT,
    FOLLOWS,
    HAS_COMMENT,
    LIKES,
    POST,
    USER,
)
from socialgraph.graph.graph_store import Entity, EntityStore

logger = logging.getLogger("socialgraph.resolver")

PathTree = Dict[str, "PathTree"]


@dataclass(frozen=True)
class RelationSpec:
    """
    How a relation field of one entity kind is dereferenced.

    - ``field``: single id stored on the record under ``key``
    - ``targets``/``sources``: relation index lookup on ``key``
    - ``authored``: derived by scanning ``target`` records whose
      ``key`` attribute equals the entity id
    """

    target: str
    lookup: Literal["field", "targets", "sources", "authored"]
    key: str

    @property
    def many(self) -> bool:
        return self.lookup != "field"


RELATIONS_BY_KIND: Dict[str, Dict[str, RelationSpec]] = {
    USER: {
        "posts": RelationSpec(POST, "authored", "author_id"),
        "followers": RelationSpec(USER, "sources", FOLLOWS),
        "following": RelationSpec(USER, "targets", FOLLOWS),
    },
    POST: {
        "author": RelationSpec(USER, "field", "author_id"),
        "likes": RelationSpec(USER, "sources", LIKES),
        "comments": RelationSpec(COMMENT, "targets", HAS_COMMENT),
    },
    COMMENT: {
        "author": RelationSpec(USER, "field", "author_id"),
        "post": RelationSpec(POST, "field", "post_id"),
    },
}

DEFAULT_PATHS: Dict[str, Tuple[str, ...]] = {
    USER: ("posts", "followers", "following"),
    POST: ("author", "likes", "comments", "comments.author"),
    COMMENT: ("author", "post"),
}


def compile_paths(kind: str, paths: Iterable[str], *, max_depth: int) -> PathTree:
    """
    Merge dotted relation paths into a tree rooted at ``kind``.

    ``["comments.author", "author"]`` on a post becomes
    ``{"comments": {"author": {}}, "author": {}}``.
    """
    tree: PathTree = {}

    for path in paths:
        parts = path.split(".")
        if not all(parts):
            raise ValidationError(f"malformed relation path '{path}'")
        if len(parts) > max_depth:
            raise ValidationError(
                f"relation path '{path}' exceeds max depth {max_depth}"
            )

        node = tree
        current = kind
        for part in parts:
            spec = RELATIONS_BY_KIND[current].get(part)
            if spec is None:
                raise ValidationError(f"unknown relation '{part}' on {current}")
            node = node.setdefault(part, {})
            current = spec.target

    return tree


class ResolutionPass:
    """
    One request-scoped expansion of id references into nested records.

    Entities are memoized by (kind, id) and relation lookups by
    (relation, direction, id), so each is fetched from the store at most
    once per pass. Recursion follows a finite path tree, so cycles in
    the data cannot cause unbounded expansion.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store
        self._entities: Dict[Tuple[str, str], Optional[Entity]] = {}
        self._links: Dict[Tuple[str, str, str], List[str]] = {}
        self._authored: Dict[Tuple[str, str], List[str]] = {}
        self.fetches = 0

    def seed(self, kind: str, entity: Entity) -> None:
        self._entities[(kind, entity.id)] = entity

    def entity(self, kind: str, entity_id: str) -> Optional[Entity]:
        key = (kind, entity_id)
        if key not in self._entities:
            self.fetches += 1
            self._entities[key] = self.store.get(kind, entity_id)
        return self._entities[key]

    def expand(self, kind: str, entity: Entity, tree: PathTree) -> Dict[str, Any]:
        out = entity.to_dict()

        for name, subtree in tree.items():
            spec = RELATIONS_BY_KIND[kind][name]

            if not spec.many:
                ref = getattr(entity, spec.key)
                child = self.entity(spec.target, ref)
                if child is None:
                    logger.warning(
                        "dangling %s.%s -> %s %s", kind, name, spec.target, ref
                    )
                    out[name] = None
                else:
                    out[name] = self.expand(spec.target, child, subtree)
                continue

            items = []
            for ref in self._related_ids(entity.id, spec):
                child = self.entity(spec.target, ref)
                if child is None:
                    logger.warning(
                        "dangling %s.%s -> %s %s", kind, name, spec.target, ref
                    )
                    continue
                items.append(self.expand(spec.target, child, subtree))
            out[name] = items

        return out

    def _related_ids(self, entity_id: str, spec: RelationSpec) -> List[str]:
        if spec.lookup == "authored":
            key = (spec.target, entity_id)
            if key not in self._authored:
                found = self.store.find(
                    spec.target,
                    lambda e: getattr(e, spec.key) == entity_id,
                )
                for e in found:
                    self.seed(spec.target, e)
                self._authored[key] = [e.id for e in found]
            return self._authored[key]

        key = (spec.key, spec.lookup, entity_id)
        if key not in self._links:
            if spec.lookup == "targets":
                self._links[key] = self.store.targets(spec.key, entity_id)
            else:
                self._links[key] = self.store.sources(spec.key, entity_id)
        return self._links[key]


class GraphResolver:
    """
    Resolves nested response graphs for queries and mutation results.

    Every public call runs its own ``ResolutionPass``.
    """

    def __init__(self, store: EntityStore, config: Optional[ResolverConfig] = None) -> None:
        self.store = store
        self.config = config or ResolverConfig()

    def compile(self, kind: str, paths: Optional[Iterable[str]] = None) -> PathTree:
        if paths is None:
            paths = DEFAULT_PATHS[kind]
        return compile_paths(kind, paths, max_depth=self.config.max_depth)

    def resolve(
        self,
        kind: str,
        entity_id: str,
        paths: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Resolve one root entity. A missing root raises ``NotFound``;
        missing references below the root resolve to absent.
        """
        tree = self.compile(kind, paths)
        run = ResolutionPass(self.store)
        root = run.entity(kind, entity_id)
        if root is None:
            raise NotFound(kind, entity_id)
        return run.expand(kind, root, tree)

    def resolve_entity(
        self,
        kind: str,
        entity: Entity,
        paths: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        tree = self.compile(kind, paths)
        run = ResolutionPass(self.store)
        run.seed(kind, entity)
        return run.expand(kind, entity, tree)

    def resolve_all(
        self,
        kind: str,
        paths: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        tree = self.compile(kind, paths)
        run = ResolutionPass(self.store)
        roots = self.store.find(kind)
        for entity in roots:
            run.seed(kind, entity)
        return [run.expand(kind, entity, tree) for entity in roots]
