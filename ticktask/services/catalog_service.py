from __future__ import annotations

import logging
import uuid

from ticktask.domain.entities import ListEntity, TagEntity
from ticktask.infra.repository import ListRepository, TagRepository, TaskRepository

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#6b7280"


class ListService:
    def __init__(self, repo: ListRepository, task_repo: TaskRepository) -> None:
        self._repo = repo
        self._task_repo = task_repo

    def list_lists(self) -> list[ListEntity]:
        return self._repo.list_lists()

    def create_list(self, name: str, color: str = DEFAULT_COLOR, icon: str = "list") -> ListEntity:
        name = name.strip()
        if not name:
            raise ValueError("List name must not be empty")
        return self._repo.create_list({"id": str(uuid.uuid4()), "name": name, "color": color, "icon": icon})

    def update_list(self, list_id: str, data: dict) -> ListEntity | None:
        return self._repo.update_list(list_id, data)

    def delete_list(self, list_id: str) -> None:
        cleared = self._task_repo.clear_list(list_id)
        self._repo.delete_list(list_id)
        logger.info("Deleted list %s, detached %d tasks", list_id, cleared)


class TagService:
    def __init__(self, repo: TagRepository) -> None:
        self._repo = repo

    def list_tags(self) -> list[TagEntity]:
        return self._repo.list_tags()

    def create_tag(self, name: str, color: str = DEFAULT_COLOR) -> TagEntity:
        name = name.strip().lstrip("#")
        if not name:
            raise ValueError("Tag name must not be empty")
        existing = self._repo.get_by_name(name)
        if existing:
            return existing
        return self._repo.create_tag({"id": str(uuid.uuid4()), "name": name, "color": color})

    def rename_tag(self, tag_id: str, name: str) -> TagEntity | None:
        # Rules match on tag names and keep referring to the old one.
        return self._repo.update_tag(tag_id, {"name": name.strip()})

    def delete_tag(self, tag_id: str) -> None:
        self._repo.delete_tag(tag_id)
