# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

from az_shared.errors import FatalError
from az_shared.logs import log
from az_shared.shell import DockerCmd, run_command
from az_shared.util import get_cli_and_python_version


class DockerCliClient:
    """Builds and pushes images with the local docker CLI. Output streams to the terminal."""

    def build(self, image: str, dockerfile: str, platform: str, context: str = ".") -> None:
        cmd = (
            DockerCmd("build")
            .param("--platform", platform)
            .param("-f", dockerfile)
            .param("-t", image)
            .arg(context)
        )
        log.debug(f"Running: {cmd}")
        result = run_command(cmd, capture_output=False)
        if not result.success:
            raise FatalError(
                f"Command failed with exit code {result.returncode}: {cmd}{get_cli_and_python_version('docker')}"
            )

    def push(self, image: str) -> bool:
        """Push an image, returning whether docker reported success."""
        cmd = DockerCmd("push").arg(image)
        log.debug(f"Running: {cmd}")
        return run_command(cmd, capture_output=False).success
