from functools import lru_cache
import logging
import time

from socialgraph.graph.graph_store import EntityStore, GraphStore

from backend.app.config import AppConfig
from backend.app.services.social_graph_service import SocialGraphService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_store() -> EntityStore:
    """
    The process-wide store handle.

    Built once here and handed to the service explicitly; nothing else
    reaches for it as a global.
    """
    logger = logging.getLogger("socialgraph.startup")
    t0 = time.perf_counter()
    store = GraphStore()
    logger.info("[startup] entity store init in %.3fs", time.perf_counter() - t0)
    return store


@lru_cache
def get_social_graph_service() -> SocialGraphService:
    config = get_config()

    return SocialGraphService(
        store=get_store(),
        config=config.socialgraph,
    )
