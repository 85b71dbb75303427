# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

def format_error_details(message: str) -> str:
    return f"\n\nError Details:\n{message}"


# Errors that prevent the script from completing successfully
class FatalError(Exception):
    """An error that prevents provisioning from completing successfully."""


class MissingOutputError(FatalError):
    """A value required by a later step was not returned by the control plane."""


class RefreshTokenError(FatalError):
    """Auth token has expired."""


# Expected Errors
class RateLimitExceededError(Exception):
    """We have exceeded the rate limit for the Azure API. Script will retry until MAX_RETRIES are reached."""


class ResourceNotFoundError(Exception):
    """Azure resource was not found. This gets thrown during some resource existence checks."""


# Errors users can resolve through manual action
class UserActionRequiredError(Exception):
    """An error that requires user action to resolve."""

    def __init__(self, message: str, user_action_message: str | None = None):
        super().__init__(message)
        self.user_action_message = user_action_message or message


class AzCliNotAuthenticatedError(UserActionRequiredError):
    """Azure CLI is not authenticated. User needs to run 'az login'."""

    def __init__(self, message: str = "Azure CLI is not authenticated"):
        super().__init__(message, user_action_message="Not logged in to Azure. Please run 'az login' first.")


class AccessError(UserActionRequiredError):
    """Not authorized to access the resource."""

    def __init__(self, message: str):
        user_action_message = "You don't have the necessary Azure permissions to access, create, or perform an action on a required resource."
        user_action_message += "\nPlease contact your Azure administrator if necessary."
        user_action_message += format_error_details(message)
        super().__init__(message, user_action_message)


class PolicyError(UserActionRequiredError):
    """An Azure policy disallowed the requested resource."""

    def __init__(self, message: str):
        user_action_message = "An Azure policy assigned to your subscription prevented a resource from being created."
        user_action_message += "\nPlease review the policy with your Azure administrator and rerun."
        user_action_message += format_error_details(message)
        super().__init__(message, user_action_message)


class InputParamValidationError(UserActionRequiredError):
    """Validation error in user input parameters."""

    def __init__(self, message: str):
        user_action_message = "Invalid input parameter. Please check your input(s) and try again."
        user_action_message += format_error_details(message)
        super().__init__(message, user_action_message)


class ResourceProviderRegistrationError(UserActionRequiredError):
    """Resource provider did not reach the registered state."""

    def __init__(self, namespace: str, subscription_id: str, last_state: str):
        message = f"Provider registration failed for {namespace}. Current state: {last_state}"
        user_action_message = f"ERROR: Provider registration failed for {namespace}. You may need Owner permissions or ask your subscription admin to register it."
        user_action_message += f"\nRun: az provider register --namespace {namespace} --subscription {subscription_id}"
        super().__init__(message, user_action_message)
        self.namespace = namespace
        self.last_state = last_state


class RegistryNameUnavailableError(UserActionRequiredError):
    """No available container registry name was found within the attempt budget."""

    def __init__(self, base_name: str, attempts: int):
        message = f"Exhausted {attempts} attempts looking for an available registry name based on '{base_name}'"
        user_action_message = f"ERROR: Unable to find an available ACR name after {attempts} attempts. Please choose a unique name and rerun."
        super().__init__(message, user_action_message)
        self.attempts = attempts


class ImagePushError(UserActionRequiredError):
    """Pushing an image to the container registry kept failing."""

    def __init__(self, image: str, registry_name: str, attempts: int):
        message = f"Failed to push image after {attempts} attempts."
        user_action_message = "\n".join(
            [
                message,
                "",
                "This can happen due to network issues or large image size.",
                "",
                "Options to fix:",
                "1. Re-run the script (it will use cached layers and be faster)",
                "2. Check your internet connection",
                "3. Try pushing manually:",
                f"   az acr login --name {registry_name}",
                f"   docker push {image}",
            ]
        )
        super().__init__(message, user_action_message)
        self.attempts = attempts
