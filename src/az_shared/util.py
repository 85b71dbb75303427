# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

import subprocess
import sys

VERSION_TIMEOUT = 5  # seconds


def is_empty_or_whitespace(s: str | None) -> bool:
    """Check if a string is empty, missing or contains only whitespace."""

    return not s or s.isspace()


def clean_output(output: str | None) -> str:
    """Strip carriage returns and surrounding whitespace from CLI output."""
    return (output or "").replace("\r", "").strip()


def get_cli_and_python_version(executable: str = "az", timeout: int = VERSION_TIMEOUT) -> str:
    """
    Return the CLI and python versions on success, otherwise return a failure string for the CLI part.
    """
    python_version = sys.version_info
    python_result = f"python version: {python_version[0]}.{python_version[1]}.{python_version[2]}"
    try:
        res = subprocess.run(
            [executable, "version", "--output", "json"] if executable == "az" else [executable, "--version"],
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        cli_result = f"{executable} version:\n{res.stdout.strip()}"
    except subprocess.TimeoutExpired:
        cli_result = f"Could not retrieve '{executable} version': timeout after {timeout}s"
    except Exception as e:
        cli_result = f"Could not retrieve '{executable} version': {e}"
    return f"\n{cli_result}\n{python_result}"
