from fastapi import FastAPI
from contextlib import asynccontextmanager

from backend.app.config import AppConfig
from backend.app.api.routes_graph import router as graph_router
from backend.app.api.routes_graphql import create_graphql_router
from backend.app.dependencies import get_social_graph_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Builds the store handle and service once at startup and stops the
    mutation workers at shutdown.
    """
    service = get_social_graph_service()

    yield

    service.close()


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.include_router(
        create_graphql_router(
            graphiql=config.graphiql,
            request_logging=config.request_logging,
        ),
        prefix=f"{config.api_prefix}{config.graphql_path}",
        tags=["graphql"],
    )

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    return app


config = AppConfig()
app = create_app(config)
