# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from time import monotonic, sleep

from az_shared.errors import ResourceProviderRegistrationError
from az_shared.logs import log

from .az_client import AzureCliClient
from .constants import (
    RESOURCE_PROVIDER_REGISTERED_STATUS,
    RESOURCE_PROVIDER_REGISTRATION_INTERVAL,
    RESOURCE_PROVIDER_REGISTRATION_TIMEOUT,
)
from .polling import Clock, Sleep, poll_until


@dataclass(frozen=True)
class RegistrationResult:
    namespace: str
    registered: bool
    last_state: str


def wait_for_provider_registration(
    namespace: str,
    get_state: Callable[[], str],
    register: Callable[[], None],
    timeout: float = RESOURCE_PROVIDER_REGISTRATION_TIMEOUT,
    interval: float = RESOURCE_PROVIDER_REGISTRATION_INTERVAL,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> RegistrationResult:
    """Request registration of a resource provider and wait until it reports 'Registered'.

    A failed registration request is logged and polling continues. Never waits past timeout + interval.
    """
    log.info(f"Checking provider registration for: {namespace}")
    state = get_state()
    if state == RESOURCE_PROVIDER_REGISTERED_STATUS:
        log.info(f"Provider {namespace} already registered.")
        return RegistrationResult(namespace, True, state)

    log.info(f"Registering provider {namespace}...")
    try:
        register()
    except Exception as e:
        log.warning(f"Registration request for {namespace} failed, checking state anyway: {e}")

    result = poll_until(
        get_state,
        lambda s: s == RESOURCE_PROVIDER_REGISTERED_STATUS,
        timeout,
        interval,
        on_check=lambda s: log.info(f"  {namespace} registration state: {s}"),
        sleep=sleep,
        clock=clock,
    )
    if result.done:
        log.info(f"Provider {namespace} registered successfully.")
    else:
        log.error(f"Timed out waiting for provider {namespace} to register. Current state: {result.last_value}")
    return RegistrationResult(namespace, result.done, result.last_value)


def ensure_providers_registered(
    client: AzureCliClient,
    namespaces: Iterable[str],
    subscription_id: str,
    timeout: float = RESOURCE_PROVIDER_REGISTRATION_TIMEOUT,
    interval: float = RESOURCE_PROVIDER_REGISTRATION_INTERVAL,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> list[RegistrationResult]:
    """Make sure every namespace is registered in the subscription, stopping at the first failure."""
    results = []
    for namespace in namespaces:
        result = wait_for_provider_registration(
            namespace,
            lambda ns=namespace: client.get_provider_state(ns, subscription_id),
            lambda ns=namespace: client.register_provider(ns, subscription_id),
            timeout=timeout,
            interval=interval,
            sleep=sleep,
            clock=clock,
        )
        if not result.registered:
            raise ResourceProviderRegistrationError(namespace, subscription_id, result.last_state)
        results.append(result)
    return results
