DEFAULTS = {
    # Service title
    "APP_NAME": "socialgraph-backend",
    # Prefix for every route
    "API_PREFIX": "",
    # Mount point of the GraphQL endpoint, relative to API_PREFIX
    "GRAPHQL_PATH": "/graphql",
    # Serve the GraphiQL IDE on GET
    "GRAPHIQL": True,
    # Log query text and variables for every GraphQL operation
    "REQUEST_LOGGING": True,
    # Bind address for the bootstrap script
    "HOST": "0.0.0.0",
    # Listen port for the bootstrap script
    "PORT": 4000,
    # Root log level for the bootstrap script
    "LOG_LEVEL": "INFO",
    # Seed the Alice/Bob demo graph at startup
    "SEED_DEMO": False,
    # Maximum relation path length per resolution
    "RESOLVER_MAX_DEPTH": 6,
    # Mutation timeout in milliseconds (0 = no timeout)
    "MUTATION_TIMEOUT_MS": 5000,
    # Retries for idempotent mutations on retryable failures
    "MUTATION_MAX_RETRIES": 3,
    # Linear backoff between retries in milliseconds
    "MUTATION_RETRY_BACKOFF_MS": 50,
    # Worker threads executing bounded mutations
    "MUTATION_WORKERS": 4,
}
