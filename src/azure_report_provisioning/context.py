# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from dataclasses import dataclass, replace
from typing import Optional

from az_shared.errors import MissingOutputError
from az_shared.util import is_empty_or_whitespace


@dataclass(frozen=True)
class RegistryCredentials:
    username: str
    password: str


@dataclass(frozen=True)
class ProvisioningContext:
    """Values accumulated while provisioning; each step returns an evolved copy."""

    subscription_id: Optional[str] = None
    storage_account_key: Optional[str] = None
    registry_name: Optional[str] = None
    registry_credentials: Optional[RegistryCredentials] = None
    workspace_id: Optional[str] = None
    workspace_customer_id: Optional[str] = None
    workspace_key: Optional[str] = None
    image: Optional[str] = None
    container_fqdn: Optional[str] = None

    def evolve(self, **changes) -> "ProvisioningContext":
        return replace(self, **changes)

    def require(self, name: str, message: Optional[str] = None) -> str:
        """Return a string value later steps depend on, failing if it was never set or is blank."""
        value = getattr(self, name)
        if is_empty_or_whitespace(value):
            raise MissingOutputError(message or f"Required value '{name}' is missing from a previous step")
        return value

    def require_registry_credentials(self) -> RegistryCredentials:
        credentials = self.registry_credentials
        if credentials is None or is_empty_or_whitespace(credentials.username) or is_empty_or_whitespace(
            credentials.password
        ):
            raise MissingOutputError("Container registry credentials are missing from a previous step")
        return credentials
