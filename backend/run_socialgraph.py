import json
import logging
import sys
from pathlib import Path

import uvicorn

ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from backend.app.config import AppConfig  # noqa: E402
from backend.app.dependencies import get_social_graph_service  # noqa: E402
from backend.app.main import create_app  # noqa: E402
from backend.app.services.social_graph_service import SocialGraphService  # noqa: E402


def seed_demo(service: SocialGraphService) -> None:
    """
    Alice follows Bob; Alice posts; Bob likes the post twice and comments.
    """
    logger = logging.getLogger("socialgraph.run")

    alice = service.add_user("Alice", "a@x.com")
    bob = service.add_user("Bob", "b@x.com")
    service.follow_user(alice["id"], bob["id"])

    post = service.add_post("T", "C", author_id=alice["id"])
    service.like_post(post["id"], bob["id"])
    service.like_post(post["id"], bob["id"])
    service.add_comment(post["id"], "hi", bob["id"])

    logger.info("[seed] %s", json.dumps(service.post(post["id"]), indent=2))
    logger.info("[seed] stats %s", service.stats())


def main() -> None:
    config = AppConfig()
    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("socialgraph.run")

    if config.seed_demo:
        seed_demo(get_social_graph_service())

    app = create_app(config)
    logger.info(
        "GraphQL server on http://%s:%s%s%s",
        config.host,
        config.port,
        config.api_prefix,
        config.graphql_path,
    )
    uvicorn.run(app, host=config.host, port=int(config.port), log_config=None)


if __name__ == "__main__":
    main()
