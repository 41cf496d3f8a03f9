"""Remote project template source.

The template lives in a GitHub repository. Two independent requests are made
against it:
- the commits API, for the sha of the latest commit on the template branch
- the branch archive, a .tar.gz of the whole repository

Either may fail; the resolver decides what to fall back to.
"""

import logging
from typing import Any, Optional

import requests
from tqdm import tqdm

from .artifact import TemplateArtifact

logger = logging.getLogger(__name__)

TEMPLATE_REPO = "vexide/vexide-template"
TEMPLATE_BRANCH = "main"
USER_AGENT = "vexide/cargo-v5"


class TemplateFetchError(Exception):
    """Raised when a template request fails."""

    pass


class MalformedResponseError(TemplateFetchError):
    """Raised when the commits API response has no usable sha."""

    pass


class TemplateSource:
    """Fetches the project template and its current commit sha from GitHub."""

    def __init__(
        self,
        repo: str = TEMPLATE_REPO,
        branch: str = TEMPLATE_BRANCH,
        session: Optional[requests.Session] = None,
        chunk_size: int = 8192,
        show_progress: bool = True,
    ):
        """Initialize template source.

        Args:
            repo: GitHub "owner/name" of the template repository
            branch: Branch to fetch
            session: requests session to use (a new one if None)
            chunk_size: Size of chunks for downloading
            show_progress: Whether to show a download progress bar
        """
        self.repo = repo
        self.branch = branch
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.chunk_size = chunk_size
        self.show_progress = show_progress

    @property
    def commits_url(self) -> str:
        return f"https://api.github.com/repos/{self.repo}/commits/{self.branch}?per-page=1"

    @property
    def archive_url(self) -> str:
        return f"https://github.com/{self.repo}/archive/refs/heads/{self.branch}.tar.gz"

    def fetch_current_sha(self) -> str:
        """Get the sha of the latest commit on the template branch.

        Returns:
            Commit sha

        Raises:
            TemplateFetchError: If the request fails
            MalformedResponseError: If the response carries no string sha
        """
        try:
            response = self.session.get(self.commits_url)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TemplateFetchError(f"Failed to fetch template version: {e}")

        try:
            payload: Any = response.json()
        except ValueError:
            raise MalformedResponseError("Template version response is not JSON")

        sha = payload.get("sha") if isinstance(payload, dict) else None
        if not isinstance(sha, str):
            raise MalformedResponseError("Template version response has no sha")

        return sha

    def fetch_archive(self) -> bytes:
        """Download the complete template archive into memory.

        Raises:
            TemplateFetchError: If the download fails
        """
        logger.debug(f"Fetching template from {self.archive_url}")

        try:
            response = self.session.get(self.archive_url, stream=True)
            response.raise_for_status()

            total_size = int(response.headers.get("content-length", 0))
            progress_bar = None
            if self.show_progress:
                progress_bar = tqdm(
                    total=total_size or None,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc="Downloading template",
                    leave=False,
                )

            chunks = []
            try:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        chunks.append(chunk)
                        if progress_bar:
                            progress_bar.update(len(chunk))
            finally:
                if progress_bar:
                    progress_bar.close()

        except requests.RequestException as e:
            raise TemplateFetchError(f"Failed to download {self.archive_url}: {e}")

        logger.debug("Successfully fetched template.")
        return b"".join(chunks)

    def fetch_template(self) -> TemplateArtifact:
        """Download the template and tag it with the current sha.

        The sha is requested after the archive; if that request fails the
        template is returned without a sha.

        Raises:
            TemplateFetchError: If the archive download fails
        """
        data = self.fetch_archive()

        try:
            sha: Optional[str] = self.fetch_current_sha()
        except TemplateFetchError as e:
            logger.debug(f"Downloaded template has no known sha: {e}")
            sha = None

        return TemplateArtifact(data=data, sha=sha)
