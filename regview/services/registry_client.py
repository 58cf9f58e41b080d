import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from regview.core.errors import DecodeError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RegistryClient:
    """
    Thin async client for the registry's distribution HTTP API.

    Every request carries the pre-configured Authorization value and is
    attempted exactly once. Failures are normalized into the RegistryError
    taxonomy:

    - transport problems (connect, TLS, timeout) -> NetworkError
    - non-2xx answers                            -> UpstreamError(status)
    - bodies that do not parse into the model    -> DecodeError
    """

    def __init__(
        self,
        base_url: str,
        authorization: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": authorization},
            transport=transport,
            # blob GETs are commonly redirected to object storage (S3, GCS, Azure)
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        logger.debug(f"{method} {self.base_url}{path}")
        try:
            response = await self._client.request(method, path, headers=headers)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise NetworkError.from_exception(e) from e

        if not response.is_success:
            logger.info(f"{method} {path} -> {response.status_code}")
            raise UpstreamError(response.status_code)

        return response

    async def get(
        self,
        path: str,
        model: Optional[Type[ModelT]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET a JSON document.

        Args:
            path: Path relative to the registry base URL (e.g. "/v2/_catalog")
            model: Pydantic model to validate the body into; raw JSON when None
            headers: Extra request headers (e.g. Accept for manifests)

        Returns:
            An instance of `model`, or the decoded JSON value.

        Raises:
            NetworkError, UpstreamError, DecodeError
        """
        response = await self._send("GET", path, headers)
        try:
            payload = response.json()
            if model is None:
                return payload
            return model.model_validate(payload)
        except (ValueError, ValidationError) as e:
            raise DecodeError.from_body(e, response.text) from e

    async def head(self, path: str, headers: Optional[Dict[str, str]] = None) -> httpx.Headers:
        """HEAD a resource and return the response headers."""
        response = await self._send("HEAD", path, headers)
        return response.headers

    async def delete(self, path: str) -> None:
        await self._send("DELETE", path)
