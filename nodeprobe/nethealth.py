"""Quick HTTP download speed and integrity check.

Exits non-zero when the download times out, is slower than the minimum
bandwidth, or does not match its published SHA-512 checksum.
"""

import argparse
import hashlib
import logging
import sys
import time
import urllib.error
import urllib.request
from dataclasses import dataclass

log = logging.getLogger(__name__)

DEFAULT_URL = "http://storage.example.com/bandwidth-test/64MB.bin"
DEFAULT_HASH_URL = "http://storage.example.com/bandwidth-test/sha512.txt"
DEFAULT_LENGTH = 64 * 1024 * 1024
DEFAULT_TIMEOUT = 30
DEFAULT_MINIMUM = 10

_CHUNK = 64 * 1024


class NetHealthError(Exception):
    """Raised when the network check fails."""


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a successful check."""

    content_length: int
    elapsed_ms: int
    bandwidth_kib: int
    sha512: str


def parse_hash_file(content) -> str:
    """Return the hash from checksum file contents of the form ``<label> <hash>``."""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    parts = content.split(" ")
    if len(parts) <= 1:
        raise NetHealthError(f"Could not parse SHA hash file contents ({content})")
    return parts[1].strip("\n ")


def _content_length(response) -> int:
    value = response.headers.get("Content-Length")
    try:
        return int(value) if value is not None else -1
    except ValueError:
        return -1


def _head(url: str, timeout: float) -> int:
    request = urllib.request.Request(url, method="HEAD")
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return _content_length(response)


def _read_before(response, deadline: float, timeout: int) -> bytes:
    chunks = []
    while True:
        chunk = response.read(_CHUNK)
        if time.monotonic() > deadline:
            raise NetHealthError(
                f"ERROR: Timeout ({timeout}) seconds occurred before GET finished"
                " - declaring TOO SLOW"
            )
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def run_check(url, hash_url, length, timeout, minimum) -> CheckResult:
    """Download ``url``, check its length, speed (MiB/s) and SHA-512 checksum."""
    try:
        reported = _head(url, timeout)
    except (urllib.error.URLError, OSError) as exc:
        raise NetHealthError(f"Failed to find URL {url} ({exc})") from exc
    if reported != length:
        raise NetHealthError(
            f"Length reported ({reported}) is not equal to expected length ({length})"
        )
    log.info("HTTP HEAD reports content length: %d - running GET", reported)
    try:
        _head(hash_url, timeout)
    except (urllib.error.URLError, OSError) as exc:
        raise NetHealthError(f"Failed to find hash URL {hash_url} ({exc})") from exc

    start = time.monotonic()
    deadline = start + timeout
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            content_length = _content_length(response)
            if content_length != length:
                raise NetHealthError(
                    f"Length reported ({content_length}) is not equal to expected"
                    f" length ({length})"
                )
            blob = _read_before(response, deadline, timeout)
    except (urllib.error.URLError, OSError) as exc:
        raise NetHealthError(f"Failure ({exc}) while reading {url}") from exc

    elapsed_ms = max(int((time.monotonic() - start) * 1000), 1)
    bandwidth = (content_length * 1000) // (elapsed_ms * 1024)
    log.info(
        "DOWNLOAD: %d bytes %d ms Bandwidth ~ %d KiB/sec", content_length, elapsed_ms, bandwidth
    )
    if minimum * 1024 > bandwidth:
        raise NetHealthError(
            f"ERROR: Minimum bandwidth guarantee of {minimum} MiB/sec not met"
            " - network connectivity is slow"
        )

    try:
        with urllib.request.urlopen(hash_url, timeout=timeout) as response:
            content = _read_before(response, deadline, timeout)
    except (urllib.error.URLError, OSError) as exc:
        raise NetHealthError(f"Failure ({exc}) while reading {hash_url}") from exc

    expected = parse_hash_file(content)
    computed = hashlib.sha512(blob).hexdigest()
    if computed != expected:
        raise NetHealthError(
            f"ERROR: Hash Mismatch - Computed hash = '{computed}' Expected hash = '{expected}'"
        )
    log.info("Hash Matches expected value")
    return CheckResult(content_length, elapsed_ms, bandwidth, computed)


def main(argv=None) -> int:
    """Run the check from the command line; return the process exit status."""
    parser = argparse.ArgumentParser(description="HTTP download speed and integrity check.")
    parser.add_argument("-url", "--url", default=DEFAULT_URL, help="Blob URL")
    parser.add_argument("-hashurl", "--hashurl", default=DEFAULT_HASH_URL, help="Blob Hash URL")
    parser.add_argument(
        "-length", "--length", type=int, default=DEFAULT_LENGTH, help="Expected content length"
    )
    parser.add_argument(
        "-timeout", "--timeout", type=int, default=DEFAULT_TIMEOUT, help="Maximum Seconds to wait"
    )
    parser.add_argument(
        "-minimum",
        "--minimum",
        type=int,
        default=DEFAULT_MINIMUM,
        help="Minimum bandwidth expected (MiB/sec)",
    )
    options = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        run_check(options.url, options.hashurl, options.length, options.timeout, options.minimum)
    except NetHealthError as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())