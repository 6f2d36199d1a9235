"""
Sample User Service Client

Creates users against a running User Service.

Usage:
    python scripts/user_client.py http://localhost:3000 Alice Bob
"""

import sys
from typing import Any, Dict

import httpx


class UserServiceClient:
    """
    Client for the User Service HTTP API.
    """
    
    def __init__(self, api_url: str, timeout: float = 30.0):
        """
        Args:
            api_url: Base URL of the user service
            timeout: Per-request timeout in seconds
        """
        self.api_url = api_url.rstrip('/')
        self.client = httpx.Client(timeout=timeout)
    
    def ping(self) -> str:
        """Return the greeting served on the root path."""
        response = self.client.get(f"{self.api_url}/")
        response.raise_for_status()
        return response.text
    
    def create_user(self, name: str) -> Dict[str, Any]:
        """
        Create a user.
        
        Returns:
            The created user, ``{"id": ..., "name": ...}``
            
        Raises:
            httpx.HTTPError: On API errors
        """
        response = self.client.post(
            f"{self.api_url}/users",
            json={"name": name}
        )
        
        response.raise_for_status()
        return response.json()
    
    def close(self):
        """Close the HTTP client."""
        self.client.close()
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)
    
    api_url, names = sys.argv[1], sys.argv[2:]
    
    with UserServiceClient(api_url) as client:
        print(client.ping())
        for name in names:
            try:
                user = client.create_user(name)
            except httpx.HTTPStatusError as e:
                print(f"Failed to create {name!r}: HTTP {e.response.status_code}")
                continue
            print(f"Created user {user['id']}: {user['name']}")
