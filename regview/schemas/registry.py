from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

# Repository name and tag grammar of the distribution API
REPOSITORY_NAME_PATTERN = r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*(?:/[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*)*$"
TAG_PATTERN = r"^[\w][\w.-]{0,127}$"

# Digest reported for a tag whose manifest could not be resolved
UNKNOWN_DIGEST = "n/a"


# Upstream registry payloads (GET /v2/...)

class Catalog(BaseModel):
    repositories: List[str] = []

    @field_validator("repositories", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return v or []


class TagList(BaseModel):
    name: str
    # None (registry sent null / omitted the field) is kept distinct from []
    tags: Optional[List[str]] = None

    def tag_names(self) -> List[str]:
        return self.tags or []


class Descriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    media_type: str = Field(alias="mediaType")
    size: int = Field(ge=0)
    digest: str


class Manifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(alias="schemaVersion")
    media_type: str = Field(alias="mediaType")
    config: Descriptor
    layers: List[Descriptor] = []

    def total_size(self) -> int:
        """Image size as stored in the registry: every layer plus the config blob."""
        return sum(layer.size for layer in self.layers) + self.config.size


class ConfigBlob(BaseModel):
    """Image configuration blob. Only the fields surfaced to the UI are parsed."""
    model_config = ConfigDict(extra="ignore")

    created: Optional[str] = None
    architecture: Optional[str] = None
    os: Optional[str] = None


# Enriched responses served to the UI

class RepositorySummary(BaseModel):
    name: str
    last_push: Optional[str] = None
    tag_count: int = 0


class TagDetail(BaseModel):
    """
    Per-tag detail. Three shapes exist, all of them valid results:

    - full:  manifest and config blob resolved
    - basic: manifest resolved, config blob failed; metadata fields are None
    - empty: manifest failed; digest is "n/a" and size is 0
    """
    name: str
    digest: str
    size_bytes: int = 0
    created_at: Optional[str] = None
    architecture: Optional[str] = None
    os: Optional[str] = None

    @classmethod
    def empty(cls, name: str) -> "TagDetail":
        return cls(name=name, digest=UNKNOWN_DIGEST, size_bytes=0)

    @classmethod
    def basic(cls, name: str, digest: str, size_bytes: int) -> "TagDetail":
        return cls(name=name, digest=digest, size_bytes=size_bytes)

    @classmethod
    def full(cls, name: str, digest: str, size_bytes: int, blob: ConfigBlob) -> "TagDetail":
        return cls(
            name=name,
            digest=digest,
            size_bytes=size_bytes,
            created_at=blob.created,
            architecture=blob.architecture,
            os=blob.os,
        )


class ManifestInfo(BaseModel):
    name: str
    tag: str
    digest: str
