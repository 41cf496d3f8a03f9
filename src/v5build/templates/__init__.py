"""Project template management for v5build.

This module handles fetching, caching, and unpacking the project template
used by `v5build new`.
"""

from .artifact import TemplateArtifact
from .cache import TemplateCache
from .remote import MalformedResponseError, TemplateFetchError, TemplateSource
from .resolver import (
    NetworkTemplateResolver,
    OfflineTemplateResolver,
    TemplateResolver,
    bundled_template,
    create_resolver,
)
from .scaffold import ProjectDirFullError, ProjectScaffolder, ScaffoldError, new_project

__all__ = [
    "MalformedResponseError",
    "NetworkTemplateResolver",
    "OfflineTemplateResolver",
    "ProjectDirFullError",
    "ProjectScaffolder",
    "ScaffoldError",
    "TemplateArtifact",
    "TemplateCache",
    "TemplateFetchError",
    "TemplateResolver",
    "TemplateSource",
    "bundled_template",
    "create_resolver",
    "new_project",
]
