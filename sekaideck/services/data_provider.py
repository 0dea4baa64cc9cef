"""
Data access layer.

The core reads master data (cards, skills, events, ...) and user data
(owned cards, character ranks, areas, honors) by logical table name.
Storage is someone else's problem; a DataProvider only has to hand back
lists of JSON rows.
"""

import json
import logging
from collections.abc import Callable, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from sekaideck.config import settings
from sekaideck.models.failure import NotFoundError

logger = logging.getLogger(__name__)

Row = dict[str, Any]
ModelT = TypeVar("ModelT", bound=BaseModel)
ItemT = TypeVar("ItemT")


class DataProvider(Protocol):
    """Async lookup of master and user tables by logical name."""

    async def get_master_data(self, name: str) -> list[Row]: ...

    async def get_user_data(self, name: str) -> list[Row]: ...


class InMemoryDataProvider:
    """
    Provider over in-memory tables.

    Missing tables read as empty lists; the lookup helpers turn the
    resulting misses into NotFoundError.
    """

    def __init__(
        self,
        master: dict[str, list[Row]] | None = None,
        user: dict[str, list[Row]] | None = None,
    ) -> None:
        self.master = master or {}
        self.user = user or {}

    async def get_master_data(self, name: str) -> list[Row]:
        return self.master.get(name, [])

    async def get_user_data(self, name: str) -> list[Row]:
        return self.user.get(name, [])


class JsonDataProvider:
    """
    Provider over a directory of master data files and a user data export.

    Master tables live at `<data_dir>/<name>.json`; the user export is a
    single JSON object keyed by table name. Files are read once per
    provider instance.
    """

    def __init__(self, data_dir: Path | None = None, user_data_file: Path | None = None) -> None:
        self.data_dir = data_dir or settings.data_dir
        self.user_data_file = user_data_file or settings.user_data_file
        self._master: dict[str, list[Row]] = {}
        self._user: dict[str, Any] | None = None

    async def get_master_data(self, name: str) -> list[Row]:
        if name not in self._master:
            path = self.data_dir / f"{name}.json"
            if not path.exists():
                raise NotFoundError(
                    f"Master data table '{name}'",
                    detail=f"{path} does not exist. Run `python -m sekaideck.jobs.download_master_data`.",
                )
            with open(path, encoding="utf-8") as f:
                self._master[name] = json.load(f)
            logger.debug("Loaded master table %s (%d rows)", name, len(self._master[name]))
        return self._master[name]

    async def get_user_data(self, name: str) -> list[Row]:
        if self._user is None:
            if not self.user_data_file.exists():
                raise NotFoundError("User data", detail=f"{self.user_data_file} does not exist")
            with open(self.user_data_file, encoding="utf-8") as f:
                self._user = json.load(f)
        rows: list[Row] = self._user.get(name, [])
        return rows


async def load_master(provider: DataProvider, name: str, model: type[ModelT]) -> list[ModelT]:
    """Fetch a master table and validate every row."""
    return [model.model_validate(row) for row in await provider.get_master_data(name)]


async def load_user(provider: DataProvider, name: str, model: type[ModelT]) -> list[ModelT]:
    """Fetch a user table and validate every row."""
    return [model.model_validate(row) for row in await provider.get_user_data(name)]


def find_or_raise(
    items: Sequence[ItemT],
    predicate: Callable[[ItemT], bool],
    what: str,
    detail: str | None = None,
) -> ItemT:
    """
    Return the first item matching predicate.

    Raises:
        NotFoundError: If nothing matches
    """
    for item in items:
        if predicate(item):
            return item
    raise NotFoundError(what, detail=detail)


class DataRepository:
    """
    Validated, memoized view over a DataProvider.

    One repository serves one recommendation call, so each table is
    fetched and validated at most once per call and never shared
    between calls.
    """

    def __init__(self, provider: DataProvider) -> None:
        self.provider = provider
        self._master: dict[str, list[Any]] = {}
        self._user: dict[str, list[Any]] = {}

    async def master(self, name: str, model: type[ModelT]) -> list[ModelT]:
        if name not in self._master:
            self._master[name] = await load_master(self.provider, name, model)
        rows: list[ModelT] = self._master[name]
        return rows

    async def user(self, name: str, model: type[ModelT]) -> list[ModelT]:
        if name not in self._user:
            self._user[name] = await load_user(self.provider, name, model)
        rows: list[ModelT] = self._user[name]
        return rows


@lru_cache
def get_data_provider() -> DataProvider:
    """Process-wide provider over the configured data files (FastAPI dependency)."""
    return JsonDataProvider(settings.data_dir, settings.user_data_file)
