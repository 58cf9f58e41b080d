import asyncio
import logging
from typing import Awaitable, List, Optional, Tuple, TypeVar

from regview.core.config import settings
from regview.core.errors import RegistryError, UpstreamError
from regview.schemas.registry import (
    Catalog,
    ManifestInfo,
    RepositorySummary,
    TagDetail,
    TagList,
)
from regview.services.cache import RepositorySummaryCache
from regview.services.manifest_resolver import ManifestResolver
from regview.services.registry_client import RegistryClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RegistryService:
    """
    Aggregates the registry API into the two views served to the UI.

    - list_repositories: every repository with its tag count and last push date
    - list_tag_details: every tag of one repository with digest, size and
      image metadata

    Catalog and tag-list failures are fatal and raised as RegistryError.
    Anything below that level (one repository, one tag) degrades into a
    partially filled result instead, so a response always has one entry per
    repository or tag listed upstream.

    Fan-out is bounded: at most `max_concurrency` per-repository or per-tag
    tasks of a single batch talk to the registry at the same time.
    """

    _instance: Optional["RegistryService"] = None

    def __init__(
        self,
        client: RegistryClient,
        cache: Optional[RepositorySummaryCache] = None,
        max_concurrency: int = 16,
    ):
        self.client = client
        self.resolver = ManifestResolver(client)
        self.cache = cache if cache is not None else RepositorySummaryCache()
        self.max_concurrency = max_concurrency

    @classmethod
    def get_instance(cls) -> "RegistryService":
        """Process-wide service; its summary cache lives as long as the process."""
        if cls._instance is None:
            client = RegistryClient(settings.REGISTRY_URL, settings.BASIC_AUTH)
            cls._instance = cls(client, max_concurrency=settings.REGISTRY_MAX_CONCURRENCY)
            logger.info(
                f"RegistryService initialized for {settings.REGISTRY_URL} "
                f"(max concurrency {settings.REGISTRY_MAX_CONCURRENCY})"
            )
        return cls._instance

    @classmethod
    async def shutdown(cls) -> None:
        if cls._instance is not None:
            await cls._instance.client.aclose()
            cls._instance = None

    async def _gather_bounded(self, coros: List[Awaitable[T]]) -> List[object]:
        """
        Run every coroutine, at most `max_concurrency` at a time, and return
        their outcomes in submission order. A failing coroutine does not cancel
        its siblings; its exception is returned in its slot.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(coro: Awaitable[T]) -> T:
            async with semaphore:
                return await coro

        return await asyncio.gather(*(bounded(c) for c in coros), return_exceptions=True)

    async def get_catalog(self) -> Catalog:
        return await self.client.get("/v2/_catalog", model=Catalog)

    async def get_tag_list(self, repo: str) -> TagList:
        return await self.client.get(f"/v2/{repo}/tags/list", model=TagList)

    # Catalog enrichment

    async def list_repositories(self) -> List[RepositorySummary]:
        """
        Summaries for every repository in the catalog, in catalog order.

        Raises:
            RegistryError: the catalog itself could not be fetched
        """
        catalog = await self.get_catalog()
        return await self._summarize(catalog.repositories)

    async def list_repositories_page(self, page: int, limit: int) -> Tuple[List[RepositorySummary], int]:
        """
        Summaries for one page of the catalog, plus the total repository count.

        Only the repositories on the requested page are enriched.
        """
        catalog = await self.get_catalog()
        start = (page - 1) * limit
        names = catalog.repositories[start:start + limit]
        return await self._summarize(names), len(catalog.repositories)

    async def _summarize(self, names: List[str]) -> List[RepositorySummary]:
        outcomes = await self._gather_bounded(
            [self.cache.get_or_create(name, lambda name=name: self._build_summary(name)) for name in names]
        )

        summaries = []
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Unexpected error summarizing {name}: {outcome}", exc_info=outcome)
                outcome = RepositorySummary(name=name)
            summaries.append(outcome)

        logger.info(f"Summarized {len(summaries)} repositories ({len(self.cache)} cached)")
        return summaries

    async def _build_summary(self, name: str) -> RepositorySummary:
        try:
            tags = (await self.get_tag_list(name)).tag_names()
        except RegistryError as e:
            logger.warning(f"Tag list unavailable for {name}, reporting zero tags: {e.message}")
            tags = []

        last_push = None
        if tags:
            # Registry order is kept; the last listed tag stands for the latest push
            try:
                last_push = await self.resolver.resolve_creation_date(name, tags[-1])
            except RegistryError as e:
                logger.warning(f"No creation date for {name}:{tags[-1]}: {e.message}")

        return RepositorySummary(name=name, last_push=last_push, tag_count=len(tags))

    # Tag enrichment

    async def list_tag_details(self, repo: str) -> List[TagDetail]:
        """
        Detail for every tag of `repo`, in the order the registry lists them.

        Does not read or write the repository summary cache.

        Raises:
            RegistryError: the tag list could not be fetched
        """
        tags = (await self.get_tag_list(repo)).tag_names()
        outcomes = await self._gather_bounded([self._resolve_tag_detail(repo, tag) for tag in tags])

        details = []
        for tag, outcome in zip(tags, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Unexpected error resolving {repo}:{tag}: {outcome}", exc_info=outcome)
                outcome = TagDetail.empty(tag)
            details.append(outcome)
        return details

    async def _resolve_tag_detail(self, repo: str, tag: str) -> TagDetail:
        try:
            manifest = await self.resolver.resolve_manifest(repo, tag)
        except RegistryError as e:
            logger.warning(f"Manifest unavailable for {repo}:{tag}: {e.message}")
            return TagDetail.empty(tag)

        digest = manifest.config.digest
        size_bytes = manifest.total_size()

        try:
            blob = await self.resolver.resolve_config_blob(repo, digest)
        except RegistryError as e:
            logger.warning(f"Config blob unavailable for {repo}:{tag}: {e.message}")
            return TagDetail.basic(tag, digest, size_bytes)

        return TagDetail.full(tag, digest, size_bytes, blob)

    # Deletion

    async def delete_tag(self, repo: str, tag: str) -> ManifestInfo:
        """
        Delete the manifest `repo:tag` points to.

        The registry only deletes by digest, so the tag is first resolved with
        a HEAD request. The repository's cached summary is dropped afterwards.

        Raises:
            RegistryError: digest resolution or deletion failed
        """
        digest = await self.resolver.resolve_head_digest(repo, tag)
        try:
            await self.client.delete(f"/v2/{repo}/manifests/{digest}")
        except UpstreamError as e:
            raise UpstreamError(
                e.status_code,
                f"Registry refused to delete {repo}:{tag} ({e.status_code}); is deletion enabled?",
            ) from e

        self.cache.invalidate(repo)
        logger.info(f"Deleted {repo}:{tag} ({digest})")
        return ManifestInfo(name=repo, tag=tag, digest=digest)
