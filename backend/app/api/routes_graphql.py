import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import strawberry
from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from strawberry.extensions import SchemaExtension
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info
from strawberry.types.nodes import SelectedField, Selection

from backend.app.api.graphql_types import (
    Comment,
    Post,
    User,
    to_comment,
    to_post,
    to_user,
)
from backend.app.dependencies import get_social_graph_service
from backend.app.services.social_graph_service import SocialGraphService

logger = logging.getLogger("socialgraph.graphql")


# ---------------------------------------------------------------------
# Selection set -> relation paths
# ---------------------------------------------------------------------


def _relation_paths(selections: Iterable[Selection], prefix: str = "") -> List[str]:
    paths: List[str] = []
    for selection in selections:
        if isinstance(selection, SelectedField):
            # Scalars carry no sub-selection; anything else is a relation.
            if not selection.selections:
                continue
            path = f"{prefix}{selection.name}"
            paths.append(path)
            paths.extend(_relation_paths(selection.selections, f"{path}."))
        else:
            paths.extend(_relation_paths(selection.selections, prefix))
    return paths


def requested_paths(info: Info) -> List[str]:
    paths: List[str] = []
    for field in info.selected_fields:
        paths.extend(_relation_paths(field.selections))
    return paths


def _service(info: Info) -> SocialGraphService:
    return info.context["service"]


# ---------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------


@strawberry.type
class Query:
    @strawberry.field
    async def user(self, info: Info, id: strawberry.ID) -> Optional[User]:
        data = await run_in_threadpool(
            _service(info).user, id, requested_paths(info)
        )
        return to_user(data)

    @strawberry.field
    async def users(self, info: Info) -> Optional[List[User]]:
        rows = await run_in_threadpool(_service(info).users, requested_paths(info))
        return [to_user(u) for u in rows]

    @strawberry.field
    async def post(self, info: Info, id: strawberry.ID) -> Optional[Post]:
        data = await run_in_threadpool(
            _service(info).post, id, requested_paths(info)
        )
        return to_post(data)

    @strawberry.field
    async def posts(self, info: Info) -> Optional[List[Post]]:
        rows = await run_in_threadpool(_service(info).posts, requested_paths(info))
        return [to_post(p) for p in rows]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_user(self, info: Info, name: str, email: str) -> Optional[User]:
        data = await run_in_threadpool(
            _service(info).add_user,
            name,
            email,
            paths=requested_paths(info),
        )
        return to_user(data)

    @strawberry.mutation
    async def add_post(
        self,
        info: Info,
        title: str,
        content: str,
        author_id: strawberry.ID,
        image_url: Optional[str] = None,
    ) -> Optional[Post]:
        data = await run_in_threadpool(
            _service(info).add_post,
            title=title,
            content=content,
            author_id=author_id,
            image_url=image_url,
            paths=requested_paths(info),
        )
        return to_post(data)

    @strawberry.mutation
    async def like_post(
        self,
        info: Info,
        post_id: strawberry.ID,
        user_id: strawberry.ID,
    ) -> Optional[Post]:
        data = await run_in_threadpool(
            _service(info).like_post,
            post_id,
            user_id,
            paths=requested_paths(info),
        )
        return to_post(data)

    @strawberry.mutation
    async def add_comment(
        self,
        info: Info,
        post_id: strawberry.ID,
        content: str,
        author_id: strawberry.ID,
    ) -> Optional[Comment]:
        data = await run_in_threadpool(
            _service(info).add_comment,
            post_id,
            content,
            author_id,
            paths=requested_paths(info),
        )
        return to_comment(data)

    @strawberry.mutation
    async def follow_user(
        self,
        info: Info,
        follower_id: strawberry.ID,
        following_id: strawberry.ID,
    ) -> Optional[User]:
        data = await run_in_threadpool(
            _service(info).follow_user,
            follower_id,
            following_id,
            paths=requested_paths(info),
        )
        return to_user(data)


# ---------------------------------------------------------------------
# Schema & router
# ---------------------------------------------------------------------


class RequestLogging(SchemaExtension):
    """
    Logs every incoming operation with its variables.
    """

    def on_operation(self):
        ctx = self.execution_context
        logger.info("--- GraphQL request ---")
        logger.info("query: %s", ctx.query)
        logger.info("variables: %s", json.dumps(ctx.variables))
        yield


def build_schema(*, request_logging: bool = True) -> strawberry.Schema:
    return strawberry.Schema(
        query=Query,
        mutation=Mutation,
        extensions=[RequestLogging] if request_logging else [],
    )


async def get_graphql_context(
    service: SocialGraphService = Depends(get_social_graph_service),
) -> Dict[str, Any]:
    return {"service": service}


def create_graphql_router(*, graphiql: bool, request_logging: bool) -> GraphQLRouter:
    return GraphQLRouter(
        build_schema(request_logging=request_logging),
        context_getter=get_graphql_context,
        graphql_ide="graphiql" if graphiql else None,
    )
