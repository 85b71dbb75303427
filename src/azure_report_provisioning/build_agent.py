# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Jenkins build agent: registry, custom image and a container instance backed by an Azure file share."""

from functools import partial
from time import monotonic, sleep

from az_shared.errors import MissingOutputError
from az_shared.logs import log

from .az_client import AzureCliClient, ContainerInstanceSpec
from .common_steps import create_resource_group, create_storage, register_providers
from .configuration import BuildAgentConfiguration, registry_login_server
from .constants import CONTAINER_FQDN_INTERVAL, CONTAINER_FQDN_TIMEOUT
from .context import ProvisioningContext
from .docker_client import DockerCliClient
from .image import push_with_retry
from .naming import find_available_name
from .pipeline import Step, run_pipeline, select_subscription
from .polling import Clock, Sleep, poll_until


def select_registry_name(
    client: AzureCliClient, config: BuildAgentConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    subscription_id = context.require("subscription_id")
    log.info("Selecting Azure Container Registry name...")
    name = find_available_name(
        config.registry_name_base,
        lambda candidate: client.check_registry_name_available(candidate, subscription_id),
    )
    log.info(f"Using ACR name: {name}")
    return context.evolve(registry_name=name)


def create_registry(
    client: AzureCliClient, config: BuildAgentConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    client.create_registry(context.require("registry_name"), config.resource_group, context.require("subscription_id"))
    return context


def build_and_push_image(
    client: AzureCliClient,
    docker: DockerCliClient,
    config: BuildAgentConfiguration,
    context: ProvisioningContext,
    sleep: Sleep = sleep,
) -> ProvisioningContext:
    registry_name = context.require("registry_name")
    image = config.image_reference(registry_name)

    client.registry_login(registry_name)

    log.info(f"Building image {image} for {config.build_platform}...")
    docker.build(image, config.dockerfile, config.build_platform, config.build_context)

    log.info("Pushing image to ACR...")
    push_with_retry(
        partial(docker.push, image),
        image,
        registry_name,
        max_attempts=config.push_max_attempts,
        delay=config.push_retry_delay,
        sleep=sleep,
    )
    return context.evolve(image=image)


def fetch_registry_credentials(
    client: AzureCliClient, config: BuildAgentConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    log.info("Retrieving ACR credentials...")
    context = context.evolve(
        registry_credentials=client.get_registry_credentials(
            context.require("registry_name"), context.require("subscription_id")
        )
    )
    context.require_registry_credentials()
    return context


def deploy_container(
    client: AzureCliClient, config: BuildAgentConfiguration, context: ProvisioningContext
) -> ProvisioningContext:
    spec = ContainerInstanceSpec(
        resource_group=config.resource_group,
        name=config.container_name,
        image=context.require("image"),
        registry_login_server=registry_login_server(context.require("registry_name")),
        registry_credentials=context.require_registry_credentials(),
        dns_name_label=config.dns_name_label,
        port=config.port,
        cpu=config.cpu,
        memory_gb=config.memory_gb,
        storage_account_name=config.storage_account_name,
        storage_account_key=context.require("storage_account_key"),
        file_share_name=config.file_share_name,
        mount_path=config.volume_mount_path,
        environment_variables=dict(config.environment_variables),
    )
    client.create_container_instance(spec, context.require("subscription_id"))
    return context


def wait_for_container_fqdn(
    client: AzureCliClient,
    config: BuildAgentConfiguration,
    context: ProvisioningContext,
    timeout: float = CONTAINER_FQDN_TIMEOUT,
    interval: float = CONTAINER_FQDN_INTERVAL,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> ProvisioningContext:
    subscription_id = context.require("subscription_id")
    log.info(f"Waiting for container {config.container_name} to be assigned an address...")
    result = poll_until(
        lambda: client.get_container_fqdn(config.resource_group, config.container_name, subscription_id),
        bool,
        timeout,
        interval,
        sleep=sleep,
        clock=clock,
    )
    if not result.done:
        raise MissingOutputError(
            f"Container {config.container_name} was not assigned an address after {timeout} seconds"
        )
    log.info(f"Container address: {result.last_value}")
    return context.evolve(container_fqdn=result.last_value)


def build_steps(
    client: AzureCliClient,
    docker: DockerCliClient,
    config: BuildAgentConfiguration,
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
        Step("Selecting container registry name", partial(select_registry_name, client, config)),
        Step("Creating container registry", partial(create_registry, client, config)),
        Step(
            f"Building and pushing {config.image_name}:{config.image_tag}",
            partial(build_and_push_image, client, docker, config, sleep=sleep),
        ),
        Step("Retrieving container registry credentials", partial(fetch_registry_credentials, client, config)),
        Step(f"Deploying container {config.container_name}", partial(deploy_container, client, config)),
        Step(
            "Waiting for container address",
            partial(wait_for_container_fqdn, client, config, sleep=sleep, clock=clock),
        ),
    ]


def deploy_build_agent(
    config: BuildAgentConfiguration,
    client: AzureCliClient | None = None,
    docker: DockerCliClient | None = None,
    sleep: Sleep = sleep,
    clock: Clock = monotonic,
) -> ProvisioningContext:
    """Provision the registry and storage, publish the Jenkins image and run it. Returns the collected outputs."""
    client = client or AzureCliClient()
    docker = docker or DockerCliClient()
    log.info("Deploying Jenkins for Research Report Generation")
    context = select_subscription(client, config.subscription_id)
    context = run_pipeline(build_steps(client, docker, config, sleep=sleep, clock=clock), context)
    log.info("Deployment complete")
    return context
