# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Selection of globally unique container registry names."""

import re
import secrets
from collections.abc import Callable, Iterator
from time import time

from az_shared.errors import RegistryNameUnavailableError
from az_shared.logs import log

from .constants import (
    REGISTRY_NAME_BASE_MAX_LENGTH,
    REGISTRY_NAME_FALLBACK_PREFIX,
    REGISTRY_NAME_MAX_ATTEMPTS,
    REGISTRY_NAME_MAX_LENGTH,
    REGISTRY_NAME_MIN_LENGTH,
)

SUFFIX_HEX_BYTES = 3
MAX_SUFFIX_REGENERATIONS = 10

INVALID_NAME_CHARACTERS = re.compile(r"[^a-z0-9]")


def epoch_digits(count: int, clock: Callable[[], float] = time) -> str:
    """Last `count` digits of the current epoch time in seconds."""
    return str(int(clock()))[-count:]


def random_suffix() -> str:
    """Six lowercase hex characters."""
    return secrets.token_hex(SUFFIX_HEX_BYTES)


def normalize_name(base: str, max_length: int = REGISTRY_NAME_BASE_MAX_LENGTH) -> str:
    """Lowercase the base name, drop anything that is not [a-z0-9] and truncate it."""
    return INVALID_NAME_CHARACTERS.sub("", base.lower())[:max_length]


def fit_length(
    candidate: str,
    min_length: int = REGISTRY_NAME_MIN_LENGTH,
    max_length: int = REGISTRY_NAME_MAX_LENGTH,
    padding: Callable[[], str] = lambda: epoch_digits(5),
) -> str:
    """Truncate to max_length, padding short candidates up to min_length."""
    candidate = candidate[:max_length]
    if len(candidate) < min_length:
        candidate = (candidate + padding())[:max_length]
    return candidate


def generate_candidates(
    base: str,
    max_attempts: int = REGISTRY_NAME_MAX_ATTEMPTS,
    suffix: Callable[[], str] = random_suffix,
    min_length: int = REGISTRY_NAME_MIN_LENGTH,
    max_length: int = REGISTRY_NAME_MAX_LENGTH,
    padding: Callable[[], str] = lambda: epoch_digits(5),
) -> Iterator[str]:
    """Yield up to max_attempts distinct candidate names.

    The first candidate is the normalized base itself, every later one carries a suffix.
    """
    normalized = normalize_name(base) or f"{REGISTRY_NAME_FALLBACK_PREFIX}{epoch_digits(5)}"
    seen: set[str] = set()

    for attempt in range(1, max_attempts + 1):
        for _ in range(MAX_SUFFIX_REGENERATIONS):
            raw = normalized if attempt == 1 else f"{normalized}{suffix()}"
            candidate = fit_length(raw, min_length, max_length, padding)
            if candidate not in seen:
                break
        else:
            log.warning(f"Could not generate a new name candidate from '{normalized}' after {attempt - 1} attempts")
            return
        seen.add(candidate)
        yield candidate


def find_available_name(
    base: str,
    is_available: Callable[[str], bool],
    max_attempts: int = REGISTRY_NAME_MAX_ATTEMPTS,
    suffix: Callable[[], str] = random_suffix,
    min_length: int = REGISTRY_NAME_MIN_LENGTH,
    max_length: int = REGISTRY_NAME_MAX_LENGTH,
) -> str:
    """Return the first candidate derived from `base` that `is_available` accepts.

    Raises RegistryNameUnavailableError when the attempt budget runs out.
    """
    for candidate in generate_candidates(base, max_attempts, suffix, min_length, max_length):
        log.debug(f"Checking ACR name availability: {candidate}")
        if is_available(candidate):
            log.info(f"Registry name {candidate} is available")
            return candidate
        log.debug(f"Registry name {candidate} is not available")

    raise RegistryNameUnavailableError(base, max_attempts)
