"""Constants for resumable uploads."""

CHUNK_MULTIPLE = 256 * 1024  # Chunk sizes should be a multiple of 256 KiB
DEFAULT_CHUNK_SIZE = 64 * CHUNK_MULTIPLE  # 16 MiB
DEFAULT_FRAGMENT_SIZE = 1024 * 1024  # read size for byte sources

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 0.0
MAX_BACKOFF_SECONDS = 300
DEFAULT_TIMEOUT_SECONDS = 300.0

FINAL_SUCCESS_CODE = 200
RESUME_INCOMPLETE_CODE = 308

ENV_PREFIX = "RESUMABLE_UPLOAD_"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
