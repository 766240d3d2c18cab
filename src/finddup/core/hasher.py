"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements full-content file hashing with pluggable hash algorithms.

HasherImpl always produces a digest pair (fast 128-bit + strong 256-bit).
For large files the two digests are computed by two concurrent tasks, each
reading the file through its own handle; the result does not depend on it.
"""

import hashlib
import logging
import os
import stat
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import xxhash

from finddup.core.exceptions import DigestError, UnsupportedAlgorithmError
from finddup.core.interfaces import Hasher, HashAlgorithm
from finddup.core.models import FileDigests, DEFAULT_CONCURRENCY_THRESHOLD

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Platforms where running two hashing threads side by side is known to work
CONCURRENCY_SAFE_PLATFORMS = ("linux", "darwin", "win32", "freebsd", "openbsd", "netbsd", "sunos")


# Use the same way to implement and use any other hashing algorithm
class MD5AlgorithmImpl(HashAlgorithm):
    name = "md5"
    digest_bits = 128

    def new(self):
        return hashlib.md5()


class XXH128AlgorithmImpl(HashAlgorithm):
    name = "xxh128"
    digest_bits = 128

    def new(self):
        return xxhash.xxh3_128()


class SHA256AlgorithmImpl(HashAlgorithm):
    name = "sha256"
    digest_bits = 256

    def new(self):
        return hashlib.sha256()


ALGORITHMS: Dict[str, HashAlgorithm] = {
    algo.name: algo
    for algo in (MD5AlgorithmImpl(), XXH128AlgorithmImpl(), SHA256AlgorithmImpl())
}


def get_algorithm(name: str) -> HashAlgorithm:
    """Looks up an algorithm in the allow-list."""
    try:
        return ALGORITHMS[name]
    except KeyError:
        raise UnsupportedAlgorithmError(
            f"Unsupported digest algorithm '{name}'. "
            f"Valid options: {', '.join(sorted(ALGORITHMS))}"
        ) from None


def concurrency_supported() -> bool:
    """Runtime probe: can this interpreter run the two digests in parallel threads?"""
    if not sys.platform.startswith(CONCURRENCY_SAFE_PLATFORMS):
        return False
    try:
        probe = threading.Thread(target=lambda: None)
        probe.start()
        probe.join()
    except RuntimeError:
        return False
    return True


class HasherImpl(Hasher):
    """
    Computes full-content digests for catalog records.

    Args:
        fast_algorithm: 128-bit algorithm name (md5 or xxh128).
        strong_algorithm: 256-bit algorithm name (sha256).
        concurrent: True/False forces the mode; None probes the platform.
        concurrency_threshold: Files larger than this many bytes are hashed concurrently.
    """

    def __init__(
        self,
        fast_algorithm: str = "md5",
        strong_algorithm: str = "sha256",
        concurrent: Optional[bool] = None,
        concurrency_threshold: int = DEFAULT_CONCURRENCY_THRESHOLD,
    ):
        self.fast = get_algorithm(fast_algorithm)
        self.strong = get_algorithm(strong_algorithm)
        if self.fast.digest_bits != 128:
            raise UnsupportedAlgorithmError(f"'{fast_algorithm}' is not a 128-bit algorithm")
        if self.strong.digest_bits != 256:
            raise UnsupportedAlgorithmError(f"'{strong_algorithm}' is not a 256-bit algorithm")

        self.concurrent = concurrency_supported() if concurrent is None else bool(concurrent)
        self.concurrency_threshold = concurrency_threshold

    def digest(self, path: str, algorithm: str) -> str:
        """
        Hash the full content of `path` with `algorithm`, returned as lower-case hex.

        Raises:
            UnsupportedAlgorithmError: algorithm is not in the allow-list (fatal).
            DigestError: file is missing, unreadable or not a regular file (recoverable).
        """
        algo = get_algorithm(algorithm)
        return self._hash_file(path, algo)

    def compute_digests(self, path: str, size: int) -> FileDigests:
        """
        Compute the fast and strong digests of one file.
        Both succeed or a DigestError is raised; a partial pair is never returned.
        """
        if self.concurrent and size > self.concurrency_threshold:
            return self._compute_concurrently(path)

        fast = self._hash_file(path, self.fast)
        strong = self._hash_file(path, self.strong)
        return FileDigests(fast=fast, strong=strong)

    def _compute_concurrently(self, path: str) -> FileDigests:
        logger.debug(f"Hashing concurrently: {path}")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="digest") as pool:
            fast_future = pool.submit(self._hash_file, path, self.fast)
            strong_future = pool.submit(self._hash_file, path, self.strong)
            # result() re-raises the task's exception; the pool joins both on exit
            fast = fast_future.result()
            strong = strong_future.result()
        return FileDigests(fast=fast, strong=strong)

    @staticmethod
    def _hash_file(path: str, algo: HashAlgorithm) -> str:
        """Reads the whole file in chunks through a private handle."""
        try:
            st = os.stat(path)
            if not stat.S_ISREG(st.st_mode):
                raise DigestError(path, "not a regular file")

            state = algo.new()
            with open(path, "rb") as f:
                while True:
                    data = f.read(CHUNK_SIZE)
                    if not data:
                        break
                    state.update(data)
            return state.hexdigest()
        except OSError as e:
            raise DigestError(path, e.strerror or str(e)) from e
