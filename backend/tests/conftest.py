from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_social_graph_service
from backend.app.services.social_graph_service import SocialGraphService

from socialgraph.config.settings import (
    MutationConfig,
    ResolverConfig,
    SocialGraphConfig,
)
from socialgraph.graph.graph_mutator import GraphMutator
from socialgraph.graph.graph_query import GraphResolver
from socialgraph.graph.graph_store import GraphStore


def make_config(**mutation) -> SocialGraphConfig:
    policy = {"timeout_ms": 0, "max_retries": 3, "retry_backoff_ms": 0}
    policy.update(mutation)
    return SocialGraphConfig(
        resolver=ResolverConfig(max_depth=4),
        mutation=MutationConfig(**policy),
    )


@pytest.fixture()
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture()
def mutator(store: GraphStore) -> GraphMutator:
    return GraphMutator(store)


@pytest.fixture()
def resolver(store: GraphStore) -> GraphResolver:
    return GraphResolver(store, ResolverConfig(max_depth=4))


@pytest.fixture()
def service(store: GraphStore):
    svc = SocialGraphService(store=store, config=make_config())
    yield svc
    svc.close()


@pytest.fixture()
def client(service: SocialGraphService):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    app.dependency_overrides[get_social_graph_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
