"""
Remote API access for the ALVS backend.

Usage:
    from clineng_core.api import APIConfig, RemoteAPIClient

    client = RemoteAPIClient(APIConfig(api_name="alvs", base_url="https://example.com/api.php"))
    equipment = client.get_all()
"""
from .remote_client import APIConfig, RemoteAPIClient

__all__ = ["APIConfig", "RemoteAPIClient"]
