# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from .constants import (
    APP_INFRASTRUCTURE_RESOURCE_PROVIDERS,
    BUILD_AGENT_RESOURCE_PROVIDERS,
    DEFAULT_LOCATION,
    IMAGE_BUILD_PLATFORM,
    IMAGE_PUSH_MAX_ATTEMPTS,
    IMAGE_PUSH_RETRY_DELAY,
    REGISTRY_LOGIN_SERVER_SUFFIX,
    RESOURCE_PROVIDER_REGISTRATION_INTERVAL,
    RESOURCE_PROVIDER_REGISTRATION_TIMEOUT,
    SUBSCRIPTION_ENV_VAR,
)
from .naming import epoch_digits


def resolve_subscription_id(argument: Optional[str], environ: Mapping[str, str] = os.environ) -> Optional[str]:
    """Subscription id from the command line, then the environment. None means use the active az session."""
    for candidate in (argument, environ.get(SUBSCRIPTION_ENV_VAR)):
        if candidate and candidate.strip():
            return candidate.strip()
    return None


def registry_login_server(registry_name: str) -> str:
    return f"{registry_name}.{REGISTRY_LOGIN_SERVER_SUFFIX}"


@dataclass
class AppInfrastructureConfiguration:
    """Parameters for the application infrastructure (Container Apps) setup"""

    subscription_id: Optional[str] = None
    resource_group: str = "research-report-app-rg"
    location: str = DEFAULT_LOCATION
    registry_name: str = "researchreportacrskv"
    container_env_name: str = "research-report-env"
    # Generated in __post_init__ when empty: max 24 chars, lowercase alphanumeric
    storage_account_name: str = ""
    file_share_name: str = "generated-reports"
    workspace_name: str = ""

    resource_providers: list[str] = field(default_factory=lambda: list(APP_INFRASTRUCTURE_RESOURCE_PROVIDERS))
    provider_registration_timeout: int = RESOURCE_PROVIDER_REGISTRATION_TIMEOUT
    provider_registration_interval: int = RESOURCE_PROVIDER_REGISTRATION_INTERVAL

    show_secrets: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.storage_account_name:
            self.storage_account_name = f"reportapp{epoch_digits(6)}"
        if not self.workspace_name:
            self.workspace_name = f"{self.resource_group}-law"


@dataclass
class BuildAgentConfiguration:
    """Parameters for the Jenkins build agent deployment"""

    subscription_id: Optional[str] = None
    resource_group: str = "research-report-jenkins-rg"
    location: str = DEFAULT_LOCATION
    storage_account_name: str = "reportjenkinsstoreskv"
    file_share_name: str = "jenkins-data"
    registry_name_base: str = "researchreportacr"
    container_name: str = "jenkins-research-report"
    dns_name_label: str = ""

    image_name: str = "custom-jenkins"
    image_tag: str = "lts-git-configured"
    dockerfile: str = "Dockerfile.jenkins"
    build_context: str = "."
    build_platform: str = IMAGE_BUILD_PLATFORM

    port: int = 8080
    cpu: int = 2
    memory_gb: int = 4
    volume_mount_path: str = "/var/jenkins_home"
    environment_variables: dict[str, str] = field(
        default_factory=lambda: {"JAVA_OPTS": "-Djenkins.install.runSetupWizard=true"}
    )

    resource_providers: list[str] = field(default_factory=lambda: list(BUILD_AGENT_RESOURCE_PROVIDERS))
    provider_registration_timeout: int = RESOURCE_PROVIDER_REGISTRATION_TIMEOUT
    provider_registration_interval: int = RESOURCE_PROVIDER_REGISTRATION_INTERVAL
    push_max_attempts: int = IMAGE_PUSH_MAX_ATTEMPTS
    push_retry_delay: int = IMAGE_PUSH_RETRY_DELAY

    log_level: str = "INFO"

    def __post_init__(self):
        if not self.dns_name_label:
            self.dns_name_label = f"jenkins-research-{epoch_digits(5)}"

    def image_reference(self, registry_name: str) -> str:
        """Full image reference inside the given registry."""
        return f"{registry_login_server(registry_name)}/{self.image_name}:{self.image_tag}"


Configuration = AppInfrastructureConfiguration | BuildAgentConfiguration
