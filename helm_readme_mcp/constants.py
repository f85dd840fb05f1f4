"""Shared constants for Helm README MCP."""

SERVER_NAME = "helm-package-readme-mcp"
SERVER_VERSION = "1.0.0"
USER_AGENT = f"{SERVER_NAME}/{SERVER_VERSION}"

# Network defaults (SSE transport only)
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9010

# SSE transport paths
SSE_PATH = "/sse"
POST_MESSAGES_PATH = "/messages/"

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"

# Upstream endpoints
ARTIFACTHUB_API_URL = "https://artifacthub.io/api/v1"
GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"

# HTTP behaviour
HTTP_TIMEOUT = 30.0  # seconds per request
HTTP_RETRIES = 3
HTTP_RETRY_BASE_DELAY = 1.0  # seconds, doubled per attempt
ENRICHMENT_RETRIES = 2  # values / changelog / raw README fetches

# Cache defaults (milliseconds / bytes, matching the env-var units)
CACHE_TTL_MS = 3_600_000
CACHE_MAX_SIZE_BYTES = 104_857_600
SEARCH_CACHE_TTL_MS = 300_000
CACHE_CLEANUP_INTERVAL = 300.0  # seconds between expiry sweeps
CACHE_ENTRY_SIZE_ESTIMATE = 10_000  # bytes assumed per entry

# Extraction limits
MAX_README_EXAMPLES = 15
MAX_VALUES_EXAMPLES = 5
