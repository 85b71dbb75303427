# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Fail-fast sequential execution of provisioning steps.

Each step is one blocking control-plane operation that receives the context built so far and
returns an evolved copy. The first exception stops the run; resources already created are left
in place.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from az_shared.errors import InputParamValidationError
from az_shared.logs import log, log_header

from .az_client import AzureCliClient
from .context import ProvisioningContext


@dataclass(frozen=True)
class Step:
    title: str
    action: Callable[[ProvisioningContext], ProvisioningContext]


def run_pipeline(steps: Sequence[Step], context: ProvisioningContext) -> ProvisioningContext:
    total = len(steps)
    for index, step in enumerate(steps, start=1):
        log_header(f"STEP {index}/{total}: {step.title}")
        context = step.action(context)
    return context


def select_subscription(client: AzureCliClient, requested_subscription_id: str | None) -> ProvisioningContext:
    """Verify the az login and pin the subscription every later call runs against."""
    log.info("Verifying Azure login...")
    client.verify_login()

    if requested_subscription_id:
        log.info(f"Setting Azure subscription to: {requested_subscription_id}")
        try:
            client.set_subscription(requested_subscription_id)
        except RuntimeError as e:
            raise InputParamValidationError(
                f"Failed to set subscription {requested_subscription_id}. Please verify the subscription ID."
            ) from e
    else:
        log.info("No subscription ID provided. Using current default subscription.")

    context = ProvisioningContext(subscription_id=client.get_current_subscription())
    subscription_id = context.require("subscription_id")
    log.info(f"Using subscription: {subscription_id}")
    return context
