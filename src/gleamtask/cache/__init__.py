"""Content fingerprint cache APIs."""

from .keys import file_sha256, fingerprint
from .store import CACHE_FILENAME, TEST_CACHE_FILENAME, FingerprintStore

__all__ = [
    "CACHE_FILENAME",
    "TEST_CACHE_FILENAME",
    "FingerprintStore",
    "file_sha256",
    "fingerprint",
]
