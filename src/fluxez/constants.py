"""
Endpoint paths and wire-level constants shared by the client and its services.
"""

FLUXEZ_BASE_URL = "https://api-dev.fluxez.com/api/v1"

USER_AGENT = "fluxez-python/0.1.0"

# Statuses the transport retries with backoff; network errors are always retried
RETRYABLE_STATUSES = frozenset({408, 429, 500, 501, 502, 503, 504})


class QueryType:
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class Boolean:
    AND = "AND"
    OR = "OR"


class JoinKind:
    INNER = "inner"
    LEFT = "left"
    RIGHT = "right"
    FULL = "full"


class Direction:
    ASC = "asc"
    DESC = "desc"


API_ENDPOINTS = {
    # Data operations
    "QUERY": "/query",
    "QUERY_EXECUTE": "/query/execute",
    "NATURAL_QUERY": "/query/natural",
    "HEALTH": "/health",
    # Storage
    "STORAGE": {
        "UPLOAD": "/storage/upload",
        "FILE": "/storage/file",
        "DOWNLOAD": "/storage/download",
        "SIGNED_URL": "/storage/signed-url",
        "LIST": "/storage/list",
        "PUBLIC": "/storage/public",
    },
    # Search
    "SEARCH": {
        "SEARCH": "/search",
        "VECTOR": "/search/vector",
        "AGGREGATE": "/search/aggregate",
        "SUGGEST": "/search/suggest",
        "AUTOCOMPLETE": "/search/autocomplete",
        "MORE_LIKE_THIS": "/search/more-like-this",
        "COUNT": "/search/count",
        "DELETE_BY_QUERY": "/search/delete-by-query",
        "REINDEX": "/search/reindex",
        "INDEX": "/search/index",
    },
    # Analytics
    "ANALYTICS": {
        "TRACK": "/analytics/track",
        "QUERY": "/analytics/query",
        "FUNNEL": "/analytics/funnel",
        "COHORT": "/analytics/cohort",
        "METRIC": "/analytics/metric",
        "REALTIME": "/analytics/realtime",
        "USER": "/analytics/user",
        "SESSION": "/analytics/session",
        "PAGE": "/analytics/page",
        "CONVERSION": "/analytics/conversion",
        "RETENTION": "/analytics/retention",
        "EXPORT": "/analytics/export",
    },
    # Cache
    "CACHE": {
        "OPERATION": "/cache/operation",
        "INVALIDATE": "/cache/invalidate",
        "STATS": "/cache/stats",
    },
    # Tenant auth
    "TENANT_AUTH": {
        "REGISTER": "/tenant-auth/register",
        "LOGIN": "/tenant-auth/login",
        "LOGOUT": "/tenant-auth/logout",
        "REFRESH": "/tenant-auth/refresh",
        "ME": "/tenant-auth/me",
        "USERS": "/tenant-auth/users",
        "PROFILE": "/tenant-auth/profile",
        "FORGOT_PASSWORD": "/tenant-auth/forgot-password",
        "RESET_PASSWORD": "/tenant-auth/reset-password",
        "CHANGE_PASSWORD": "/tenant-auth/password/change",
        "REQUEST_VERIFICATION": "/tenant-auth/email/verify/request",
        "VERIFY_EMAIL": "/tenant-auth/verify-email",
        "TWO_FACTOR": "/tenant-auth/2fa",
        "SESSIONS": "/tenant-auth/sessions",
        "ROLES": "/tenant-auth/roles",
        "VALIDATE_API_KEY": "/api-key/validate",
    },
    # Email
    "EMAIL": {
        "SEND": "/email/send",
        "SEND_TEMPLATED": "/email/send-templated",
        "SEND_BULK": "/email/send-bulk",
        "QUEUE": "/email/queue",
        "VERIFY": "/email/verify",
        "TEMPLATES": "/email/templates",
        "STATS": "/email/stats",
    },
    # Queue
    "QUEUE": {
        "SEND": "/queue/send",
        "SEND_BATCH": "/queue/send-batch",
        "RECEIVE": "/queue/receive",
        "DELETE": "/queue/delete",
        "CREATE": "/queue/create",
        "DELETE_QUEUE": "/queue/delete-queue",
        "LIST": "/queue/list",
        "PURGE": "/queue/purge",
        "STATS": "/queue/stats",
    },
    # Workflow
    "WORKFLOW": {
        "BASE": "/workflow",
        "CREATE": "/workflow/create",
        "LIST": "/workflow/list",
        "VALIDATE": "/workflow/validate",
        "GENERATE": "/workflow/generate",
    },
    # AI text operations
    "AI_TEXT": {
        "GENERATE": "/ai/text/generate",
        "CHAT": "/ai/text/chat",
        "CODE_GENERATE": "/ai/text/code/generate",
        "SUMMARIZE": "/ai/text/summarize",
        "TRANSLATE": "/ai/text/translate",
        "EMBEDDINGS": "/ai/text/embeddings",
    },
}
