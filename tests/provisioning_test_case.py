# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from unittest import TestCase
from unittest.mock import MagicMock
from unittest.mock import patch as mock_patch

from azure_report_provisioning.az_client import AzureCliClient
from azure_report_provisioning.context import ProvisioningContext, RegistryCredentials
from azure_report_provisioning.docker_client import DockerCliClient

from tests.test_data import (
    REGISTRY_PASSWORD,
    REGISTRY_USERNAME,
    STORAGE_ACCOUNT_KEY,
    SUBSCRIPTION_ID,
    WORKSPACE_CUSTOMER_ID,
    WORKSPACE_ID,
    WORKSPACE_KEY,
)


class ProvisioningTestCase(TestCase):
    def patch(self, path: str, **kwargs):
        patcher = mock_patch(path, **kwargs)
        self.addCleanup(patcher.stop)
        return patcher.start()

    def fake_az_client(self) -> MagicMock:
        """An Azure client whose lookups all return usable values."""
        client = MagicMock(spec=AzureCliClient)
        client.get_current_subscription.return_value = SUBSCRIPTION_ID
        client.get_provider_state.return_value = "Registered"
        client.get_storage_account_key.return_value = STORAGE_ACCOUNT_KEY
        client.check_registry_name_available.return_value = True
        client.get_registry_credentials.return_value = RegistryCredentials(REGISTRY_USERNAME, REGISTRY_PASSWORD)
        client.create_log_analytics_workspace.return_value = WORKSPACE_ID
        client.get_workspace_customer_id.return_value = WORKSPACE_CUSTOMER_ID
        client.get_workspace_shared_key.return_value = WORKSPACE_KEY
        return client

    def fake_docker_client(self) -> MagicMock:
        docker = MagicMock(spec=DockerCliClient)
        docker.push.return_value = True
        return docker

    def subscribed_context(self, **values) -> ProvisioningContext:
        return ProvisioningContext(subscription_id=SUBSCRIPTION_ID, **values)
