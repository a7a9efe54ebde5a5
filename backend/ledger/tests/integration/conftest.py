from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ledger.service import LedgerService
from ledger.settings import LedgerSettings
from shared.db import Database

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def db(tmp_path: Path) -> Iterator[Database]:
    database = Database(tmp_path / "ledger.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def service(db: Database) -> LedgerService:
    return LedgerService.for_database(db, LedgerSettings())
