"""Shared constants for nuts-tool."""

TOOL_DIR_NAME = ".nuts"
REGISTRY_DIR_NAME = "container.d"
CONFIG_FILE_NAME = "config.yml"

DIR_MODE = 0o700
FILE_MODE = 0o600

PASSWORD_PROMPT = "Enter a password: "
REPEAT_PASSWORD_PROMPT = "Repeat the password: "

CIPHER_NONE = "none"
CIPHER_AES256_GCM = "aes256-gcm"
CIPHERS = (CIPHER_AES256_GCM, CIPHER_NONE)
DEFAULT_CIPHER = CIPHER_AES256_GCM

KDF_NONE = "none"
KDF_PBKDF2_SHA256 = "pbkdf2-sha256"
DEFAULT_KDF_ITERATIONS = 100000
MIN_KDF_ITERATIONS = 1000
TRACE_LEVEL = 5
