"""Template resolution strategies.

A resolver decides which template archive `new` unpacks. Two strategies exist
and are selected at runtime:

- NetworkTemplateResolver: cache-aware, checks the remote sha and downloads
  when the cache is stale, falling back to the cache and then to the bundled
  archive.
- OfflineTemplateResolver: always the bundled archive.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..config import Settings
from .artifact import TemplateArtifact
from .cache import TemplateCache
from .remote import TemplateFetchError, TemplateSource

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).parent / "assets"
BUNDLED_TEMPLATE = ASSETS_DIR / "vexide-template.tar.gz"


def bundled_template() -> TemplateArtifact:
    """Return the template archive shipped with v5build.

    It has no sha and is never written to the cache.
    """
    return TemplateArtifact(data=BUNDLED_TEMPLATE.read_bytes(), sha=None)


class TemplateResolver(ABC):
    """Resolves the template archive to scaffold from."""

    @abstractmethod
    def resolve(self, download: bool = True) -> TemplateArtifact:
        """Pick a template archive.

        Args:
            download: Whether a fresh template may be downloaded

        Returns:
            Template to unpack
        """
        pass


class OfflineTemplateResolver(TemplateResolver):
    """Resolver that only ever uses the bundled archive."""

    def resolve(self, download: bool = True) -> TemplateArtifact:
        logger.debug("Template fetching disabled, using builtin template.")
        return bundled_template()


class NetworkTemplateResolver(TemplateResolver):
    """Resolver backed by the local cache and the remote template source.

    Evaluated once per call, in priority order:
    1. download not requested: whatever is cached
    2. cached sha equals the remote sha: the cache, without downloading
    3. otherwise: a fresh download, stored in the cache
    4. download failed: the cache, however stale, with a warning
    With no candidate left, the bundled archive is used.
    """

    def __init__(self, cache: TemplateCache, source: TemplateSource):
        """Initialize resolver.

        Args:
            cache: Local template cache
            source: Remote template source
        """
        self.cache = cache
        self.source = source

    def resolve(self, download: bool = True) -> TemplateArtifact:
        cached = self.cache.load()
        template = self._select(cached, download)

        if template is None:
            logger.debug("No template found in cache, using builtin template.")
            return bundled_template()

        return template

    def _select(self, cached: Optional[TemplateArtifact], download: bool) -> Optional[TemplateArtifact]:
        if not download:
            return cached

        if cached is not None and cached.sha is not None:
            current_sha = self._current_sha()
            if current_sha is not None and cached.sha == current_sha:
                logger.debug("Cached template is current, skipping download.")
                return cached

        logger.debug("Cached template is out of date.")
        try:
            fetched = self.source.fetch_template()
        except TemplateFetchError as e:
            logger.warning(f"Could not fetch template, falling back to cache. ({e})")
            return cached

        self.cache.store(fetched)
        return fetched

    def _current_sha(self) -> Optional[str]:
        try:
            return self.source.fetch_current_sha()
        except TemplateFetchError as e:
            logger.debug(f"Could not determine current template version: {e}")
            return None


def create_resolver(settings: Settings) -> TemplateResolver:
    """Select the resolver strategy for the current configuration.

    Args:
        settings: Resolved settings

    Returns:
        A cache-aware resolver when template fetching is enabled and a cache
        directory is available, otherwise an offline resolver. Whether the
        cache-aware resolver may download is decided per call to `resolve`.
    """
    if not settings.fetch_template or settings.cache_dir is None:
        return OfflineTemplateResolver()

    return NetworkTemplateResolver(
        cache=TemplateCache(settings.cache_dir),
        source=TemplateSource(),
    )
