# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from collections.abc import Iterable

from .execute_cmd import execute, execute_tsv
from .logs import log
from .shell import Cmd

__all__ = ["AzCmd", "execute", "execute_tsv", "set_subscription", "get_current_subscription"]


class AzCmd(Cmd):
    """Builder for Azure CLI commands."""

    def __init__(self, service: str, action: str):
        """Initialize with service and action (e.g., 'acr', 'check-name')."""
        super().__init__([service] + action.split())

    def __str__(self) -> str:
        return "az " + super().__str__()

    def param(self, key: str, value: str, quote: bool = False) -> "Cmd":
        """Adds a key-value pair parameter"""
        return super().param(key, value, quote=quote)

    def param_list(self, key: str, values: Iterable[str], quote: bool = False) -> "Cmd":
        """Adds a list of parameters with the same key"""
        return super().param_list(key, values, quote=quote)


def set_subscription(sub_id: str):
    """Set the active Azure subscription."""
    log.debug(f"Setting active subscription to {sub_id}")
    execute(AzCmd("account", "set").param("--subscription", sub_id))


def get_current_subscription() -> str:
    """Return the id of the subscription the Azure CLI session is currently using."""
    return execute_tsv(AzCmd("account", "show").param("--query", "id"))
