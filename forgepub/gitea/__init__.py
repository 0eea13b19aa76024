"""Gitea backend: REST transport, API calls and the release client."""

from .client import GiteaClient, get_instance_url, new_gitea_client

__all__ = [
    "GiteaClient",
    "get_instance_url",
    "new_gitea_client",
]
