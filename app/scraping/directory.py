"""
Company Directory sources and IR url validation.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.scraping.errors import FatalSetupError
from app.scraping.logging_utils import log_event
from app.scraping.types import Company
from db.repositories.company_repository import CompanyRepository

logger = logging.getLogger(__name__)


def is_valid_ir_url(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def filter_valid_companies(rows: Iterable[Mapping[str, Any]]) -> list[Company]:
    """
    Convert directory rows to Companies, dropping rows with unusable IR urls.
    """

    companies: list[Company] = []
    for row in rows:
        name = str(row.get("name") or "").strip()
        ir_url = row.get("ir_url")
        if not is_valid_ir_url(ir_url):
            log_event(
                logger,
                logging.WARNING,
                "company_invalid_ir_url",
                company=name,
                ir_url=ir_url,
            )
            continue
        companies.append(
            Company(
                id=str(row.get("id") or "").strip(),
                name=name,
                symbol=str(row.get("symbol") or "").strip(),
                ir_url=str(ir_url).strip(),
            )
        )
    return companies


class CompanyDirectory(ABC):
    """
    Source of companies to crawl.
    """

    @abstractmethod
    def load(self, *, due_only: bool = False) -> list[Company]:
        """
        Return crawlable companies; raise FatalSetupError when unreachable.
        """


class SQLAlchemyCompanyDirectory(CompanyDirectory):
    def __init__(self, *, session: Session) -> None:
        self._repository = CompanyRepository(session)

    def load(self, *, due_only: bool = False) -> list[Company]:
        try:
            if due_only:
                rows = self._repository.list_due(now=datetime.now(timezone.utc))
            else:
                rows = self._repository.list_with_ir_url()
        except SQLAlchemyError as exc:
            raise FatalSetupError(f"Company directory unavailable: {exc}") from exc

        companies = filter_valid_companies(
            {"id": row.id, "name": row.name, "symbol": row.symbol, "ir_url": row.ir_url}
            for row in rows
        )
        log_event(
            logger,
            logging.INFO,
            "companies_loaded",
            source="database",
            loaded=len(companies),
            rejected=len(rows) - len(companies),
        )
        return companies


class JsonCompanyDirectory(CompanyDirectory):
    """
    Companies from a JSON file: ``{"companies": [{id, name, symbol, ir_url}]}``
    or a bare list of the same objects.
    """

    def __init__(self, *, path: str | Path) -> None:
        self._path = Path(path)

    def load(self, *, due_only: bool = False) -> list[Company]:
        if not self._path.exists():
            raise FatalSetupError(f"Company directory file not found: {self._path}")
        try:
            raw_data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise FatalSetupError(f"Company directory file unreadable: {exc}") from exc

        entries = raw_data.get("companies", []) if isinstance(raw_data, dict) else raw_data
        if not isinstance(entries, list):
            raise FatalSetupError("Invalid company directory: 'companies' must be a list.")

        companies = filter_valid_companies(entry for entry in entries if isinstance(entry, dict))
        log_event(
            logger,
            logging.INFO,
            "companies_loaded",
            source=str(self._path),
            loaded=len(companies),
        )
        return companies
