# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Narrow interface over the Azure CLI: one method per control-plane call."""

import shlex
from dataclasses import dataclass, field

from az_shared.az_cmd import AzCmd, execute, execute_tsv, get_current_subscription, set_subscription
from az_shared.errors import AzCliNotAuthenticatedError, ResourceNotFoundError
from az_shared.logs import log

from .constants import REGISTRY_SKU, RESOURCE_PROVIDER_UNKNOWN_STATUS, STORAGE_SKU
from .context import RegistryCredentials


@dataclass(frozen=True)
class ContainerInstanceSpec:
    """Everything `az container create` needs to run an image with an Azure Files volume."""

    resource_group: str
    name: str
    image: str
    registry_login_server: str
    registry_credentials: RegistryCredentials
    dns_name_label: str
    port: int
    cpu: int
    memory_gb: int
    storage_account_name: str
    storage_account_key: str
    file_share_name: str
    mount_path: str
    environment_variables: dict[str, str] = field(default_factory=dict)
    os_type: str = "Linux"


class AzureCliClient:
    """Runs each provisioning operation as a single blocking `az` invocation."""

    # ===== Session ===== #

    def verify_login(self) -> None:
        if not execute(AzCmd("account", "show"), can_fail=True):
            raise AzCliNotAuthenticatedError("Azure CLI is not authenticated. Please run 'az login' first and retry")
        log.debug("Azure CLI authentication verified")

    def set_subscription(self, subscription_id: str) -> None:
        set_subscription(subscription_id)

    def get_current_subscription(self) -> str:
        return get_current_subscription()

    # ===== Resource providers ===== #

    def get_provider_state(self, namespace: str, subscription_id: str) -> str:
        """Registration state of a provider; a failed lookup reads as NotRegistered."""
        try:
            state = execute_tsv(
                AzCmd("provider", "show")
                .param("--namespace", namespace)
                .param("--subscription", subscription_id)
                .param("--query", "registrationState"),
                can_fail=True,
            )
        except ResourceNotFoundError as e:
            log.debug(f"Provider {namespace} lookup failed: {e}")
            return RESOURCE_PROVIDER_UNKNOWN_STATUS
        return state or RESOURCE_PROVIDER_UNKNOWN_STATUS

    def register_provider(self, namespace: str, subscription_id: str) -> None:
        execute(AzCmd("provider", "register").param("--namespace", namespace).param("--subscription", subscription_id))

    # ===== Resource group, storage ===== #

    def create_resource_group(self, name: str, location: str, subscription_id: str) -> None:
        log.info(f"Creating resource group {name} in {location}")
        execute(
            AzCmd("group", "create")
            .param("--name", name)
            .param("--location", location)
            .param("--subscription", subscription_id)
        )

    def create_storage_account(self, name: str, resource_group: str, location: str, subscription_id: str) -> None:
        log.info(f"Creating storage account {name}")
        execute(
            AzCmd("storage", "account create")
            .param("--resource-group", resource_group)
            .param("--name", name)
            .param("--location", location)
            .param("--sku", STORAGE_SKU)
            .param("--subscription", subscription_id)
        )

    def get_storage_account_key(self, account_name: str, resource_group: str, subscription_id: str) -> str:
        log.debug(f"Retrieving storage account key for {account_name}")
        return execute_tsv(
            AzCmd("storage", "account keys list")
            .param("--resource-group", resource_group)
            .param("--account-name", account_name)
            .param("--subscription", subscription_id)
            .param("--query", "'[0].value'")
        )

    def create_file_share(self, name: str, account_name: str, account_key: str, subscription_id: str) -> None:
        log.info(f"Creating file share {name}")
        execute(
            AzCmd("storage", "share create")
            .param("--name", name)
            .param("--account-name", account_name)
            .param("--account-key", account_key, quote=True)
            .param("--subscription", subscription_id)
        )

    # ===== Container registry ===== #

    def check_registry_name_available(self, name: str, subscription_id: str) -> bool:
        """Whether ACR would accept the name; a failed check counts as unavailable."""
        try:
            available = execute_tsv(
                AzCmd("acr", "check-name")
                .param("--name", name)
                .param("--subscription", subscription_id)
                .param("--query", "nameAvailable"),
                can_fail=True,
            )
        except ResourceNotFoundError as e:
            log.debug(f"Registry name check for {name} failed: {e}")
            return False
        return available.lower() == "true"

    def create_registry(self, name: str, resource_group: str, subscription_id: str) -> None:
        log.info(f"Creating container registry {name}")
        execute(
            AzCmd("acr", "create")
            .param("--resource-group", resource_group)
            .param("--name", name)
            .param("--sku", REGISTRY_SKU)
            .param("--admin-enabled", "true")
            .param("--subscription", subscription_id)
        )

    def registry_login(self, name: str) -> None:
        log.info(f"Logging in to container registry {name}")
        execute(AzCmd("acr", "login").param("--name", name))

    def get_registry_credentials(self, name: str, subscription_id: str) -> RegistryCredentials:
        log.debug(f"Retrieving admin credentials for container registry {name}")
        username = execute_tsv(
            AzCmd("acr", "credential show")
            .param("--name", name)
            .param("--subscription", subscription_id)
            .param("--query", "username")
        )
        password = execute_tsv(
            AzCmd("acr", "credential show")
            .param("--name", name)
            .param("--subscription", subscription_id)
            .param("--query", "'passwords[0].value'")
        )
        return RegistryCredentials(username, password)

    # ===== Log Analytics, Container Apps ===== #

    def create_log_analytics_workspace(
        self, name: str, resource_group: str, location: str, subscription_id: str
    ) -> str:
        """Create the workspace and return its resource id (empty when creation failed)."""
        log.info(f"Creating Log Analytics workspace {name}")
        return execute_tsv(
            AzCmd("monitor", "log-analytics workspace create")
            .param("--resource-group", resource_group)
            .param("--workspace-name", name)
            .param("--location", location)
            .param("--subscription", subscription_id)
            .param("--query", "id"),
            can_fail=True,
        )

    def get_workspace_customer_id(self, name: str, resource_group: str, subscription_id: str) -> str:
        return execute_tsv(
            AzCmd("monitor", "log-analytics workspace show")
            .param("--resource-group", resource_group)
            .param("--workspace-name", name)
            .param("--subscription", subscription_id)
            .param("--query", "customerId"),
            can_fail=True,
        )

    def get_workspace_shared_key(self, name: str, resource_group: str, subscription_id: str) -> str:
        return execute_tsv(
            AzCmd("monitor", "log-analytics workspace get-shared-keys")
            .param("--resource-group", resource_group)
            .param("--workspace-name", name)
            .param("--subscription", subscription_id)
            .param("--query", "primarySharedKey"),
            can_fail=True,
        )

    def create_container_app_environment(
        self,
        name: str,
        resource_group: str,
        location: str,
        workspace_customer_id: str,
        workspace_key: str,
        subscription_id: str,
    ) -> None:
        # --logs-workspace-id takes the workspace customerId GUID, not its resource id
        log.info(f"Creating Container Apps environment {name}")
        execute(
            AzCmd("containerapp", "env create")
            .param("--name", name)
            .param("--resource-group", resource_group)
            .param("--location", location)
            .param("--logs-workspace-id", workspace_customer_id)
            .param("--logs-workspace-key", workspace_key, quote=True)
            .param("--subscription", subscription_id)
        )

    # ===== Container instances ===== #

    def create_container_instance(self, spec: ContainerInstanceSpec, subscription_id: str) -> None:
        log.info(f"Creating container instance {spec.name}")
        env_vars = [shlex.quote(f"{key}={value}") for key, value in spec.environment_variables.items()]
        cmd = (
            AzCmd("container", "create")
            .param("--resource-group", spec.resource_group)
            .param("--name", spec.name)
            .param("--image", spec.image)
            .param("--registry-login-server", spec.registry_login_server)
            .param("--registry-username", spec.registry_credentials.username, quote=True)
            .param("--registry-password", spec.registry_credentials.password, quote=True)
            .param("--os-type", spec.os_type)
            .param("--dns-name-label", spec.dns_name_label)
            .param("--ports", str(spec.port))
            .param("--cpu", str(spec.cpu))
            .param("--memory", str(spec.memory_gb))
            .param("--azure-file-volume-account-name", spec.storage_account_name)
            .param("--azure-file-volume-account-key", spec.storage_account_key, quote=True)
            .param("--azure-file-volume-share-name", spec.file_share_name)
            .param("--azure-file-volume-mount-path", spec.mount_path)
        )
        if env_vars:
            cmd.param_list("--environment-variables", env_vars)
        execute(cmd.param("--subscription", subscription_id))

    def get_container_fqdn(self, resource_group: str, name: str, subscription_id: str) -> str:
        return execute_tsv(
            AzCmd("container", "show")
            .param("--resource-group", resource_group)
            .param("--name", name)
            .param("--subscription", subscription_id)
            .param("--query", "ipAddress.fqdn"),
            can_fail=True,
        )
