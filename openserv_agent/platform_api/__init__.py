"""HTTP clients for the OpenServ platform and runtime APIs."""

from .client import API_KEY_HEADER, PlatformApiClient, RuntimeApiClient
from .errors import PlatformApiError

__all__ = ["API_KEY_HEADER", "PlatformApiClient", "PlatformApiError", "RuntimeApiClient"]
