"""
Catalog component port definitions.

The tracking subsystem only reads the catalog; writes exist for seeding.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import Ad, Project, Survey


class CatalogPort(Protocol):
    """Read-only project/ad/survey lookups."""

    def get_project(self, project_id: str) -> Project | None:
        ...

    def list_ads(self, project_id: str) -> list[Ad]:
        """Ads of a project, active and inactive."""
        ...

    def list_surveys(self, project_id: str) -> list[Survey]:
        """Surveys of a project, active and inactive."""
        ...
