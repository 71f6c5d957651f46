"""HTTP API for agentid."""

from agentid.api.server import create_api_app

__all__ = ["create_api_app"]
