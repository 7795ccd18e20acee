from __future__ import annotations
import os

GO_IMAGE = os.environ.get("GATEWAYCI_GO_IMAGE", "brigadecore/go-tools:v0.3.0")
KANIKO_IMAGE = os.environ.get("GATEWAYCI_KANIKO_IMAGE", "brigadecore/kaniko:v0.2.0")
HELM_IMAGE = os.environ.get("GATEWAYCI_HELM_IMAGE", "brigadecore/helm-tools:v0.4.0")

# Where the project source is mounted inside every job container
LOCAL_PATH = os.environ.get("GATEWAYCI_LOCAL_PATH", "/workspaces/brigade-slack-gateway")

# Host directory mounted at LOCAL_PATH by the local docker runner
SOURCE_DIR = os.environ.get("GATEWAYCI_SOURCE_DIR", ".")
EVENT_FILE = os.environ.get("GATEWAYCI_EVENT_FILE", "/var/event/event.json")

MAIN_BRANCH = "main"
DEFAULT_DOCKER_REGISTRY = "docker.io"
DEFAULT_HELM_REGISTRY = "ghcr.io"
