from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from socialgraph.config.settings import (
    ResolverConfig,
    MutationConfig,
    SocialGraphConfig,
)

settings = Dynaconf(
    envvar_prefix="SOCIALGRAPH",
    load_dotenv=True,
    settings_files=[],
)
for _key, _value in DEFAULTS.items():
    settings.setdefault(_key, _value)


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "socialgraph-backend")
    api_prefix: str = settings.get("API_PREFIX", "")
    graphql_path: str = settings.get("GRAPHQL_PATH", "/graphql")
    graphiql: bool = settings.get("GRAPHIQL", True)
    request_logging: bool = settings.get("REQUEST_LOGGING", True)

    # ---------------- Process ----------------
    host: str = settings.get("HOST", "0.0.0.0")
    port: int = settings.get("PORT", 4000)
    log_level: str = settings.get("LOG_LEVEL", "INFO")
    seed_demo: bool = settings.get("SEED_DEMO", False)

    # ---------------- Engine Policy ----------------
    socialgraph: SocialGraphConfig = SocialGraphConfig(
        resolver=ResolverConfig(
            max_depth=settings.get("RESOLVER_MAX_DEPTH", 6),
        ),
        mutation=MutationConfig(
            timeout_ms=settings.get("MUTATION_TIMEOUT_MS", 5000),
            max_retries=settings.get("MUTATION_MAX_RETRIES", 3),
            retry_backoff_ms=settings.get("MUTATION_RETRY_BACKOFF_MS", 50),
            workers=settings.get("MUTATION_WORKERS", 4),
        ),
    )
