import os

import bcrypt

# Set environment variables for tests before importing the app
os.environ["REGISTRY_URL"] = "http://registry.test/"
os.environ["BASIC_AUTH"] = "dGVzdDp0ZXN0"
os.environ["USERNAME"] = "admin"
os.environ["HASHED_PASSWORD"] = bcrypt.hashpw(b"s3cret", bcrypt.gensalt(rounds=4)).decode()
os.environ["SECRET"] = "test-secret"
os.environ["STATIC_DIR"] = "/nonexistent-static-dir"

from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from regview.services.registry_client import RegistryClient
from regview.services.registry_service import RegistryService

REGISTRY_URL = "http://registry.test"
AUTH_HEADER = "Basic dGVzdDp0ZXN0"


class FakeRegistry:
    """
    In-memory stand-in for the registry HTTP API, served through httpx.MockTransport.

    Routes are keyed by (method, path). A route answers either with a
    (status, json, headers) tuple or by raising the given exception.
    Every request is recorded so tests can assert on upstream traffic.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, json: Any = None, status: int = 200,
            headers: Optional[Dict[str, str]] = None, method: str = "GET",
            text: Optional[str] = None):
        self.routes[(method, path)] = (status, json, headers or {}, text)

    def fail(self, path: str, exc: Exception, method: str = "GET"):
        self.routes[(method, path)] = exc

    def add_image(self, repo: str, tag: str, config_digest: str, layer_sizes: List[int],
                  config_size: int = 5, blob: Any = None):
        """Register a v2 manifest for repo:tag and, when given, its config blob."""
        self.add(f"/v2/{repo}/manifests/{tag}", {
            "schemaVersion": 2,
            "mediaType": "application/vnd.docker.distribution.manifest.v2+json",
            "config": {
                "mediaType": "application/vnd.docker.container.image.v1+json",
                "size": config_size,
                "digest": config_digest,
            },
            "layers": [
                {
                    "mediaType": "application/vnd.docker.image.rootfs.diff.tar.gzip",
                    "size": size,
                    "digest": f"sha256:layer{i}",
                }
                for i, size in enumerate(layer_sizes)
            ],
        })
        if blob is not None:
            self.add(f"/v2/{repo}/blobs/{config_digest}", blob)

    def count(self, path_fragment: str) -> int:
        return sum(1 for r in self.requests if path_fragment in r.url.path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errors": [{"code": "NAME_UNKNOWN"}]})
        if isinstance(route, Exception):
            raise route
        status, json, headers, text = route
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        if json is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=json, headers=headers)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def registry_client(fake_registry):
    return RegistryClient(REGISTRY_URL, AUTH_HEADER, transport=httpx.MockTransport(fake_registry.handler))


@pytest.fixture
def service(registry_client):
    # Reset singleton/instance state for tests
    RegistryService._instance = None
    return RegistryService(registry_client, max_concurrency=4)
