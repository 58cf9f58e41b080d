import logging

from regview.core.errors import MetadataMissingError
from regview.schemas.registry import ConfigBlob, Manifest
from regview.services.registry_client import RegistryClient

logger = logging.getLogger(__name__)

# Without this Accept header registries fall back to the legacy v1 schema,
# whose sizes and digests do not match the stored image.
MANIFEST_V2_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
MANIFEST_V2_HEADERS = {"Accept": MANIFEST_V2_MEDIA_TYPE}

DIGEST_HEADER = "Docker-Content-Digest"


class ManifestResolver:
    """Resolves per-tag manifests and the image config blobs they point at."""

    def __init__(self, client: RegistryClient):
        self.client = client

    async def resolve_manifest(self, repo: str, tag: str) -> Manifest:
        return await self.client.get(
            f"/v2/{repo}/manifests/{tag}",
            model=Manifest,
            headers=MANIFEST_V2_HEADERS,
        )

    async def resolve_config_blob(self, repo: str, digest: str) -> ConfigBlob:
        return await self.client.get(f"/v2/{repo}/blobs/{digest}", model=ConfigBlob)

    async def resolve_creation_date(self, repo: str, tag: str) -> str:
        """
        Creation date of the image behind `repo:tag`.

        Raises:
            MetadataMissingError: the config blob has no `created` field
            RegistryError: any failure fetching the manifest or the blob
        """
        manifest = await self.resolve_manifest(repo, tag)
        blob = await self.resolve_config_blob(repo, manifest.config.digest)
        if not blob.created:
            raise MetadataMissingError(f"Config blob of {repo}:{tag} has no creation date")
        return blob.created

    async def resolve_head_digest(self, repo: str, tag: str) -> str:
        """Manifest digest of `repo:tag`, as reported by the registry on a HEAD request."""
        headers = await self.client.head(
            f"/v2/{repo}/manifests/{tag}",
            headers=MANIFEST_V2_HEADERS,
        )
        digest = headers.get(DIGEST_HEADER)
        if not digest:
            raise MetadataMissingError(f"{DIGEST_HEADER} header missing for {repo}:{tag}")
        return digest
