"""Pattern resolution, hashing, cache storage and change detection."""

from .detector import ChangeDetector, check_glob, internal_paths, write_glob
from .hashing import hash_snapshot, sha256_file
from .models import CacheState, CheckResult, Snapshot
from .patterns import parse_pattern, resolve_pattern
from .store import CACHE_SCHEMA_VERSION, DEFAULT_CACHE_FILENAME, CacheStore, parse_cache_payload

__all__ = [
    "CACHE_SCHEMA_VERSION",
    "CacheState",
    "CacheStore",
    "ChangeDetector",
    "CheckResult",
    "DEFAULT_CACHE_FILENAME",
    "Snapshot",
    "check_glob",
    "hash_snapshot",
    "internal_paths",
    "parse_cache_payload",
    "parse_pattern",
    "resolve_pattern",
    "sha256_file",
    "write_glob",
]
