# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

import argparse
import logging
import sys
from collections.abc import Callable
from logging import WARNING, basicConfig, getLogger
from typing import Optional

from az_shared.errors import UserActionRequiredError
from az_shared.logs import log

from .app_infrastructure import provision_app_infrastructure
from .build_agent import deploy_build_agent
from .configuration import AppInfrastructureConfiguration, BuildAgentConfiguration, resolve_subscription_id
from .constants import SUBSCRIPTION_ENV_VAR
from .summary import app_infrastructure_summary, build_agent_summary


def add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "subscription_id",
        nargs="?",
        default=None,
        help=f"Azure subscription ID (default: ${SUBSCRIPTION_ENV_VAR}, then the active az session)",
    )
    parser.add_argument("--resource-group", type=str, help="Resource group to create")
    parser.add_argument("--location", type=str, help="Azure region (default: eastus)")
    parser.add_argument("--storage-account", type=str, help="Storage account name")
    parser.add_argument("--file-share", type=str, help="File share name")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the log level (default: INFO)",
    )


def parse_app_infrastructure_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Creates the resource group, storage, container registry, Log Analytics workspace and "
        "Container Apps environment for the research report generation system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_common_arguments(parser)
    parser.add_argument("--registry-name", type=str, help="Container registry name")
    parser.add_argument("--container-env", type=str, help="Container Apps environment name")
    parser.add_argument("--workspace-name", type=str, help="Log Analytics workspace name (default: <rg>-law)")
    parser.add_argument(
        "--hide-secrets",
        action="store_true",
        help="Mask the registry password and storage key in the final summary",
    )
    return parser.parse_args(argv)


def parse_build_agent_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deploys Jenkins for research report generation CI/CD as an Azure container instance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_common_arguments(parser)
    parser.add_argument("--registry-name-base", type=str, help="Preferred container registry name")
    parser.add_argument("--container-name", type=str, help="Container instance name")
    parser.add_argument("--dns-name-label", type=str, help="DNS name label of the container instance")
    parser.add_argument("--dockerfile", type=str, help="Dockerfile for the Jenkins image")
    parser.add_argument("--build-context", type=str, help="Docker build context directory")
    return parser.parse_args(argv)


def overrides(args: argparse.Namespace, mapping: dict[str, str]) -> dict[str, str]:
    """Configuration fields for every option given on the command line."""
    return {field: getattr(args, option) for option, field in mapping.items() if getattr(args, option)}


COMMON_OPTIONS = {
    "resource_group": "resource_group",
    "location": "location",
    "storage_account": "storage_account_name",
    "file_share": "file_share_name",
}


def build_app_infrastructure_config(args: argparse.Namespace) -> AppInfrastructureConfiguration:
    return AppInfrastructureConfiguration(
        subscription_id=resolve_subscription_id(args.subscription_id),
        show_secrets=not args.hide_secrets,
        log_level=args.log_level,
        **overrides(
            args,
            {
                **COMMON_OPTIONS,
                "registry_name": "registry_name",
                "container_env": "container_env_name",
                "workspace_name": "workspace_name",
            },
        ),
    )


def build_build_agent_config(args: argparse.Namespace) -> BuildAgentConfiguration:
    return BuildAgentConfiguration(
        subscription_id=resolve_subscription_id(args.subscription_id),
        log_level=args.log_level,
        **overrides(
            args,
            {
                **COMMON_OPTIONS,
                "registry_name_base": "registry_name_base",
                "container_name": "container_name",
                "dns_name_label": "dns_name_label",
                "dockerfile": "dockerfile",
                "build_context": "build_context",
            },
        ),
    )


def configure_logging(log_level: str):
    basicConfig(level=getattr(logging, log_level), format="%(message)s")
    getLogger("azure").setLevel(WARNING)


def run(action: Callable[[], str]):
    """Run a pipeline, print its summary to stdout and exit 1 on any failure."""
    try:
        summary = action()
    except UserActionRequiredError as e:
        log.error(e.user_action_message)
        sys.exit(1)
    except Exception as e:
        log.error(f"Failed with error: {e}")
        log.error("Check the Azure CLI output for more details")
        sys.exit(1)
    print(summary)


def app_infrastructure_main(argv: Optional[list[str]] = None):
    """Entry point of setup-app-infrastructure."""
    args = parse_app_infrastructure_arguments(argv)
    configure_logging(args.log_level)
    config = build_app_infrastructure_config(args)

    def action() -> str:
        context = provision_app_infrastructure(config)
        if config.show_secrets:
            log.warning("The summary below contains secrets. Avoid sharing this terminal output or saving it to logs.")
        return app_infrastructure_summary(config, context, show_secrets=config.show_secrets)

    run(action)


def build_agent_main(argv: Optional[list[str]] = None):
    """Entry point of deploy-build-agent."""
    args = parse_build_agent_arguments(argv)
    configure_logging(args.log_level)
    config = build_build_agent_config(args)

    def action() -> str:
        context = deploy_build_agent(config)
        return build_agent_summary(config, context)

    run(action)

