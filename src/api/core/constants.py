API_VERSION_HEADER = "X-KeyGate-Version"

# API Key Configuration
API_KEY_PREFIX = "sk-"
API_KEY_RANDOM_BYTES = 32  # 256 bits of CSPRNG material, hex encoded
API_KEY_DISPLAY_LENGTH = 10
API_KEY_DISPLAY_MARKER = "..."
API_KEY_NAME_MAX_LENGTH = 100

# Upper bound of a signed BIGINT column
MAX_TIMESTAMP_MS = 2**63 - 1

AUTHORIZATION_HEADER = "Authorization"
AUTHORIZATION_SCHEME = "Bearer"

# Permission scopes
WILDCARD_PERMISSION = "*"
ADMIN_PERMISSION = "admin:*"
ADMIN_PERMISSIONS = frozenset({WILDCARD_PERMISSION, ADMIN_PERMISSION})
DEFAULT_PERMISSIONS = [WILDCARD_PERMISSION]

# Paths excluded from request logging
SKIP_LOGGING_PATHS = {
    "/health",
    "/health/liveness",
}
