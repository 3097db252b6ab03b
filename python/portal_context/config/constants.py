"""Static operational constants.

Durations are milliseconds unless the name says otherwise.
"""

# =============================================================================
# Identity
# =============================================================================

PACKAGE_NAME = "portal_context"
DEFAULT_COMPONENT_NAME = "App"
CORRELATION_ID_PREFIX = "ctx"

# =============================================================================
# HTTP
# =============================================================================

DEFAULT_HTTP_TIMEOUT_MS = 30_000
DEFAULT_HTTP_RETRIES = 2
MAX_HTTP_RETRIES = 10

BACKOFF_BASE_MS = 200
BACKOFF_JITTER_MS = 100
BACKOFF_CAP_MS = 2_000

CORRELATION_HEADER = "X-Correlation-Id"
IDEMPOTENCY_HEADER = "X-Request-Id"
FUNCTION_KEY_HEADER = "x-functions-key"

# Path segment identifying the host platform's own REST surface
PLATFORM_API_SEGMENT = "/_api/"

# =============================================================================
# Cache
# =============================================================================

DEFAULT_CACHE_TTL_MS = 300_000
CACHE_KEY_PREFIX = "portalctx:"

# =============================================================================
# Bounded histories
# =============================================================================

LOG_HISTORY_CAPACITY = 100
METRIC_HISTORY_CAPACITY = 50
SLOW_OPERATION_THRESHOLD_MS = 1_000

# =============================================================================
# Site probe
# =============================================================================

SITE_PROBE_FIELDS = ("Title", "Id", "ServerRelativeUrl", "Url")
