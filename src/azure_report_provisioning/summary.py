# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

"""Human readable summaries printed to stdout once a pipeline completes."""

from .configuration import AppInfrastructureConfiguration, BuildAgentConfiguration
from .constants import SECRET_MASK
from .context import ProvisioningContext

BOX_WIDTH = 57


def banner(title: str) -> list[str]:
    inner = BOX_WIDTH - 1
    return [
        "",
        "╔" + "═" * inner + "╗",
        "║" + f"           {title}".ljust(inner) + "║",
        "╚" + "═" * inner + "╝",
        "",
    ]


def credential_block(label: str, value: str) -> list[str]:
    inner = BOX_WIDTH
    return [
        "┌" + "─" * inner + "┐",
        "│" + f" {label}".ljust(inner) + "│",
        f"│ Value: {value}",
        "└" + "─" * inner + "┘",
        "",
    ]


def mask_secret(value: str) -> str:
    return SECRET_MASK if value else ""


def app_infrastructure_summary(
    config: AppInfrastructureConfiguration, context: ProvisioningContext, show_secrets: bool = True
) -> str:
    credentials = context.require_registry_credentials()
    storage_key = context.require("storage_account_key")
    secret = (lambda v: v) if show_secrets else mask_secret

    lines = banner("Setup Complete!")
    lines += credential_block("Credential ID: acr-username", credentials.username)
    lines += credential_block("Credential ID: acr-password", secret(credentials.password))
    lines += credential_block("Credential ID: storage-account-name", config.storage_account_name)
    lines += credential_block("Credential ID: storage-account-key", secret(storage_key))
    lines += credential_block("Subscription ID", context.require("subscription_id"))
    return "\n".join(lines)


def build_agent_summary(config: BuildAgentConfiguration, context: ProvisioningContext) -> str:
    lines = banner("Deployment Complete!")
    lines += [
        f"Jenkins URL: http://{context.require('container_fqdn')}:{config.port}",
        "",
        "Wait 2-3 minutes for Jenkins to fully start, then run:",
        "",
        "az container exec \\",
        f"  --resource-group {config.resource_group} \\",
        f"  --name {config.container_name} \\",
        f"  --exec-command 'cat {config.volume_mount_path}/secrets/initialAdminPassword'",
        "",
        "Save this information for the next steps!",
    ]
    return "\n".join(lines)
