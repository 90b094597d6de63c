"""
Project constants definitions
"""

# ============================================================
# Connection Defaults
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_SSH_TIMEOUT = 30

# ============================================================
# SFTP Defaults
# ============================================================

DEFAULT_DIR_MODE = 511  # 0o777, umask applies on the server
DEFAULT_FILE_MODE = 0o644
DEFAULT_OPEN_MODE = "r"

# ============================================================
# Channel Draining
# ============================================================

DRAIN_CHUNK_SIZE = 32768
DRAIN_POLL_INTERVAL = 0.01

# ============================================================
# Text Encoding
# ============================================================

DEFAULT_ENCODING = "utf-8"

# ============================================================
# SSH Config
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
