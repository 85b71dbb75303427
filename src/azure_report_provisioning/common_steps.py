# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Steps both pipelines run: provider registration, resource group, storage account and file share."""

from time import monotonic, sleep

from .az_client import AzureCliClient
from .configuration import Configuration
from .context import ProvisioningContext
from .polling import Clock, Sleep
from .providers import ensure_providers_registered


def register_providers(
    client: AzureCliClient,
    config: Configuration,
    context: ProvisioningContext,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> ProvisioningContext:
    ensure_providers_registered(
        client,
        config.resource_providers,
        context.require("subscription_id"),
        timeout=config.provider_registration_timeout,
        interval=config.provider_registration_interval,
        sleep=sleep,
        clock=clock,
    )
    return context


def create_resource_group(client: AzureCliClient, config: Configuration, context: ProvisioningContext) -> ProvisioningContext:
    client.create_resource_group(config.resource_group, config.location, context.require("subscription_id"))
    return context


def create_storage(client: AzureCliClient, config: Configuration, context: ProvisioningContext) -> ProvisioningContext:
    """Storage account, its key, then the file share that needs the key."""
    subscription_id = context.require("subscription_id")
    client.create_storage_account(config.storage_account_name, config.resource_group, config.location, subscription_id)

    context = context.evolve(
        storage_account_key=client.get_storage_account_key(
            config.storage_account_name, config.resource_group, subscription_id
        )
    )
    storage_key = context.require("storage_account_key", "ERROR: could not obtain storage account key.")

    client.create_file_share(config.file_share_name, config.storage_account_name, storage_key, subscription_id)
    return context
