# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Application infrastructure: storage, registry, Log Analytics and the Container Apps environment."""

from functools import partial
from time import monotonic, sleep

from az_shared.logs import log

from .az_client import AzureCliClient
from .common_steps import create_resource_group, create_storage, register_providers
from .configuration import AppInfrastructureConfiguration
from .context import ProvisioningContext
from .pipeline import Step, run_pipeline, select_subscription
from .polling import Clock, Sleep


def create_registry(
    client: AzureCliClient, config: AppInfrastructureConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    subscription_id = context.require("subscription_id")
    client.create_registry(config.registry_name, config.resource_group, subscription_id)
    context = context.evolve(
        registry_name=config.registry_name,
        registry_credentials=client.get_registry_credentials(config.registry_name, subscription_id),
    )
    context.require_registry_credentials()
    return context


def create_log_analytics_workspace(
    client: AzureCliClient, config: AppInfrastructureConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    """The Container Apps environment needs the workspace customerId GUID and shared key, not its resource id."""
    subscription_id = context.require("subscription_id")
    name, rg = config.workspace_name, config.resource_group

    context = context.evolve(
        workspace_id=client.create_log_analytics_workspace(name, rg, config.location, subscription_id)
    )
    workspace_id = context.require(
        "workspace_id", "ERROR: failed to create or retrieve Log Analytics workspace resource id."
    )
    log.info(f"Log Analytics workspace resource id: {workspace_id}")

    log.info("Retrieving Log Analytics workspace customerId (GUID)...")
    context = context.evolve(workspace_customer_id=client.get_workspace_customer_id(name, rg, subscription_id))
    customer_id = context.require(
        "workspace_customer_id",
        "ERROR: failed to obtain Log Analytics workspace customerId. Ensure workspace exists and you have permission.",
    )
    log.info(f"Log Analytics customerId: {customer_id}")

    log.info("Retrieving Log Analytics workspace shared key...")
    context = context.evolve(workspace_key=client.get_workspace_shared_key(name, rg, subscription_id))
    context.require(
        "workspace_key",
        "ERROR: failed to obtain Log Analytics workspace shared key. Ensure you have permission to read workspace keys."
        f"\nYou can run: az monitor log-analytics workspace get-shared-keys -g {rg} -n {name}",
    )
    log.info("Log Analytics workspace key retrieved.")
    return context


def create_container_app_environment(
    client: AzureCliClient, config: AppInfrastructureConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    client.create_container_app_environment(
        config.container_env_name,
        config.resource_group,
        config.location,
        context.require("workspace_customer_id"),
        context.require("workspace_key"),
        context.require("subscription_id"),
    )
    return context


def build_steps(
    client: AzureCliClient,
    config: AppInfrastructureConfiguration,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> list[Step]:
    return [
        Step(
            "Registering resource providers",
            partial(register_providers, client, config, sleep=sleep, clock=clock),
        ),
        Step(f"Creating resource group {config.resource_group}", partial(create_resource_group, client, config)),
        Step(
            f"Creating storage account {config.storage_account_name} and file share {config.file_share_name}",
            partial(create_storage, client, config),
        ),
        Step(f"Creating container registry {config.registry_name}", partial(create_registry, client, config)),
        Step(
            f"Creating Log Analytics workspace {config.workspace_name}",
            partial(create_log_analytics_workspace, client, config),
        ),
        Step(
            f"Creating Container Apps environment {config.container_env_name}",
            partial(create_container_app_environment, client, config),
        ),
    ]


def provision_app_infrastructure(
    config: AppInfrastructureConfiguration,
    client: AzureCliClient | None = None,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> ProvisioningContext:
    """Create every resource of the application infrastructure and return the collected outputs."""
    client = client or AzureCliClient()
    log.info("Starting application infrastructure setup...")
    context = select_subscription(client, config.subscription_id)
    context = run_pipeline(build_steps(client, config, sleep=sleep, clock=clock), context)
    log.info("Application infrastructure setup complete")
    return context
