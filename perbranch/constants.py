APP_NAME = "perbranch"

# Reserved directory at the root holding settings and caches
CONFIG_DIR = f".{APP_NAME}"
CACHE_DIR = ".cache"
SETTINGS_FILE = f"{APP_NAME}.cfg"
SETTINGS_VERSION = "1.0.0"

# Used when neither a local checkout nor the remote advertises a HEAD
FALLBACK_DEFAULT_BRANCH = "main"

DEFAULT_LOCK_TIMEOUT = 300.0

ROOT_ENV_VAR = "PERBRANCH_ROOT"

# Background git calls (cache maintenance, remote probes) must never block
# on a credential prompt
NON_INTERACTIVE_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}
