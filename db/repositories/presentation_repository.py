"""
Repository for presentation catalog persistence.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from db.models.presentation import Presentation, PresentationTag


class PresentationRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_id_by_url(self, url: str) -> uuid.UUID | None:
        return self._session.scalar(select(Presentation.id).where(Presentation.url == url))

    def exists(self, url: str) -> bool:
        return self.get_id_by_url(url) is not None

    def insert(self, presentation: Presentation, *, tags: Sequence[str] = ()) -> Presentation:
        presentation.tags = [PresentationTag(tag=tag) for tag in dict.fromkeys(tags)]
        self._session.add(presentation)
        self._session.flush()
        return presentation

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(Presentation)) or 0)

    def delete_all(self) -> int:
        """
        Remove every tag and presentation. Returns deleted presentation count.
        """

        self._session.execute(delete(PresentationTag))
        result = self._session.execute(delete(Presentation))
        return int(result.rowcount or 0)
