"""
In-memory catalog for tests and the memory backend.
"""

from __future__ import annotations

from src.domain.entities import Ad, Project, Survey


class InMemoryCatalog:
    def __init__(self) -> None:
        self._projects: dict[str, Project] = {}
        self._ads: dict[str, Ad] = {}
        self._surveys: dict[str, Survey] = {}

    def save_project(self, project: Project) -> Project:
        self._projects[project.id] = project
        return project

    def save_ad(self, ad: Ad) -> Ad:
        self._ads[ad.id] = ad
        return ad

    def save_survey(self, survey: Survey) -> Survey:
        self._surveys[survey.id] = survey
        return survey

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def list_ads(self, project_id: str) -> list[Ad]:
        ads = [a for a in self._ads.values() if a.project_id == project_id]
        return sorted(ads, key=lambda a: a.created_at)

    def list_surveys(self, project_id: str) -> list[Survey]:
        surveys = [s for s in self._surveys.values() if s.project_id == project_id]
        return sorted(surveys, key=lambda s: s.created_at)
