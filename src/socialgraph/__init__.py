"""
socialgraph
===========

A small social graph engine: users, posts, comments, likes and follow
relationships.

Core idea:
- Relationships live in one relation index; per-entity views are
  derived from it, so follow symmetry holds by construction.

Public API:
- GraphStore
- GraphMutator
- GraphResolver
"""

from socialgraph.graph.graph_store import GraphStore
from socialgraph.graph.graph_mutator import GraphMutator
from socialgraph.graph.graph_query import GraphResolver

__all__ = [
    "GraphStore",
    "GraphMutator",
    "GraphResolver",
]

__version__ = "0.1.0"
