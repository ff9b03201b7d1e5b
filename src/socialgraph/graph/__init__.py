"""
Graph subsystem for socialgraph.

Defines the entity model, the store contract, and the two engines that
operate on it:
- mutation with referential integrity and symmetric relationships
- on-demand resolution of nested response graphs
"""

from socialgraph.graph.graph_schema import User, Post, Comment
from socialgraph.graph.graph_store import EntityStore, GraphStore
from socialgraph.graph.consistency import ConsistencyEnforcer
from socialgraph.graph.graph_query import GraphResolver, ResolutionPass
from socialgraph.graph.graph_mutator import GraphMutator

__all__ = [
    "User",
    "Post",
    "Comment",
    "EntityStore",
    "GraphStore",
    "ConsistencyEnforcer",
    "GraphResolver",
    "ResolutionPass",
    "GraphMutator",
]
