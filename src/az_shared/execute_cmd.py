# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

import subprocess
from re import search
from time import sleep
from typing import Optional

from .errors import (
    AccessError,
    AzCliNotAuthenticatedError,
    PolicyError,
    RateLimitExceededError,
    RefreshTokenError,
    ResourceNotFoundError,
)
from .logs import log
from .shell import Cmd
from .util import clean_output, get_cli_and_python_version

AUTH_FAILED_ERROR = "AuthorizationFailed"
PERMISSION_REQUIRED_ERROR = "permission is needed"
AZURE_THROTTLING_ERRORS = ["TooManyRequests", "Too Many Requests", "ResourceCollectionRequestsThrottled"]
REFRESH_TOKEN_EXPIRED_ERROR = "AADSTS700082"
RESOURCE_NOT_FOUND_ERROR = "ResourceNotFound"
POLICY_ERROR = "RequestDisallowedByPolicy"
NOT_LOGGED_IN_ERROR = "Please run 'az login'"

INITIAL_RETRY_DELAY = 2  # seconds
RETRY_DELAY_MULTIPLIER = 2
MAX_RETRIES = 7


def check_access_error(stderr: str) -> Optional[str]:
    # Sample:
    # (AuthorizationFailed) The client 'user@example.com' with object id '00000000-0000-0000-0000-000000000000'
    # does not have authorization to perform action 'Microsoft.Storage/storageAccounts/read'
    # over scope '/subscriptions/00000000-0000-0000-0000-000000000000' or the scope is invalid.
    # If access was recently granted, please refresh your credentials.

    client_match = search(r"client '([^']*)'", stderr)
    action_match = search(r"action '([^']*)'", stderr)
    scope_match = search(r"scope '([^']*)'", stderr)

    if not (action_match and scope_match and client_match):
        return None

    client = client_match.group(1)
    action = action_match.group(1)
    scope = scope_match.group(1)
    return f"Insufficient permissions for {client} to perform {action} on {scope}"


def command_failure(full_command: str, stdout: str, stderr: str) -> RuntimeError:
    """Build the error for an unclassified command failure, including tool versions."""
    executable = full_command.split(" ", 1)[0]
    return RuntimeError(
        f"Command failed: {full_command}\nstdout: {stdout}\nstderr: {stderr}{get_cli_and_python_version(executable)}"
    )


def execute(cmd: Cmd, can_fail: bool = False) -> str:
    """Run an Azure CLI command and return output or raise error."""

    full_command = str(cmd)
    log.debug(f"Running: {full_command}")
    delay = INITIAL_RETRY_DELAY

    for attempt in range(MAX_RETRIES):
        try:
            result = subprocess.run(full_command, shell=True, check=True, capture_output=True, text=True)
            return result.stdout
        except subprocess.CalledProcessError as e:
            stderr = str(e.stderr)
            stdout = str(e.stdout)
            if RESOURCE_NOT_FOUND_ERROR in stderr:
                raise ResourceNotFoundError(
                    f"Resource not found when executing '{full_command}'\nstdout: {stdout}\nstderr: {stderr}"
                ) from e
            if any(text in stderr for text in AZURE_THROTTLING_ERRORS):
                if attempt < MAX_RETRIES - 1:
                    log.warning(f"Azure throttling ongoing. Retrying in {delay} seconds...")
                    sleep(delay)
                    delay *= RETRY_DELAY_MULTIPLIER
                    continue
                raise RateLimitExceededError("Rate limit exceeded. Please wait a few minutes and try again.") from e
            if REFRESH_TOKEN_EXPIRED_ERROR in stderr:
                raise RefreshTokenError(stderr) from e
            if NOT_LOGGED_IN_ERROR in stderr:
                raise AzCliNotAuthenticatedError(f"Azure CLI is not authenticated when executing '{full_command}'") from e
            if AUTH_FAILED_ERROR in stderr:
                error_message = f"Insufficient permissions to access resource when executing '{full_command}'"
                error_details = check_access_error(stderr)
                if error_details:
                    raise AccessError(f"{error_message}: {error_details}") from e
                raise AccessError(error_message) from e
            if POLICY_ERROR in stderr:
                error_before_and_after_code = stderr.split(f"({POLICY_ERROR}) ")
                policy_error_message = (
                    "\n".join(error_before_and_after_code[1:]) if len(error_before_and_after_code) > 1 else stderr
                )
                raise PolicyError(policy_error_message) from e
            if PERMISSION_REQUIRED_ERROR in stderr:
                raise AccessError(f"Insufficient permissions to execute '{full_command}'") from e
            if can_fail:
                return ""
            log.error(f"Command failed: {full_command}")
            log.error(stderr)
            raise command_failure(full_command, stdout, stderr) from e

    raise SystemExit(1)  # unreachable


def execute_tsv(cmd: Cmd, can_fail: bool = False) -> str:
    """Run a command with tab-separated output and return the cleaned value."""
    return clean_output(execute(cmd.param("--output", "tsv"), can_fail=can_fail))
