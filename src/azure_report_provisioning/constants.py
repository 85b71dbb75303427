# Unless explicitly stated otherwise all files in this repository are licensed under the Apache-2 License.

# This product includes software developed at Datadog (https://www.datadoghq.com/) Copyright 2025 Datadog, Inc.

SUBSCRIPTION_ENV_VAR = "AZURE_SUBSCRIPTION_ID"
DEFAULT_LOCATION = "eastus"

RESOURCE_PROVIDER_REGISTERED_STATUS = "Registered"
RESOURCE_PROVIDER_UNKNOWN_STATUS = "NotRegistered"
RESOURCE_PROVIDER_REGISTRATION_TIMEOUT = 300  # seconds
RESOURCE_PROVIDER_REGISTRATION_INTERVAL = 5  # seconds

APP_INFRASTRUCTURE_RESOURCE_PROVIDERS = [
    "Microsoft.OperationalInsights",  # Log Analytics workspace
    "Microsoft.App",  # Container Apps environment
    "Microsoft.Web",
    "Microsoft.ContainerRegistry",  # ACR
    "Microsoft.Storage",  # Storage account + file share
]
BUILD_AGENT_RESOURCE_PROVIDERS = [
    "Microsoft.ContainerInstance",  # Jenkins container
    "Microsoft.ContainerRegistry",
    "Microsoft.Storage",
]

# Container registry naming rules
REGISTRY_NAME_MIN_LENGTH = 5
REGISTRY_NAME_MAX_LENGTH = 50
REGISTRY_NAME_BASE_MAX_LENGTH = 40
REGISTRY_NAME_MAX_ATTEMPTS = 12
REGISTRY_NAME_FALLBACK_PREFIX = "acr"
REGISTRY_LOGIN_SERVER_SUFFIX = "azurecr.io"
REGISTRY_SKU = "Basic"

STORAGE_SKU = "Standard_LRS"

IMAGE_PUSH_MAX_ATTEMPTS = 3
IMAGE_PUSH_RETRY_DELAY = 5  # seconds
IMAGE_BUILD_PLATFORM = "linux/amd64"

CONTAINER_FQDN_TIMEOUT = 300  # seconds
CONTAINER_FQDN_INTERVAL = 10  # seconds

SECRET_MASK = "********"
