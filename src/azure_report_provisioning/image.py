# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from collections.abc import Callable
from time import sleep

from az_shared.errors import ImagePushError
from az_shared.logs import log

from .constants import IMAGE_PUSH_MAX_ATTEMPTS, IMAGE_PUSH_RETRY_DELAY
from .polling import Sleep


def push_with_retry(
    push: Callable[[], bool],
    image: str,
    registry_name: str,
    max_attempts: int = IMAGE_PUSH_MAX_ATTEMPTS,
    delay: float = IMAGE_PUSH_RETRY_DELAY,
    sleep: Sleep = sleep,
) -> int:
    """Push with a fixed delay between attempts. Returns the attempt number that succeeded."""
    for attempt in range(1, max_attempts + 1):
        if push():
            log.info("Image pushed successfully!")
            return attempt
        if attempt < max_attempts:
            log.warning(f"Push failed. Retrying ({attempt}/{max_attempts})...")
            sleep(delay)

    log.error(f"Failed to push image {image} after {max_attempts} attempts.")
    raise ImagePushError(image, registry_name, max_attempts)
