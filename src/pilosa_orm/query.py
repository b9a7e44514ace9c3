"""PQL query values: base, bitmap, and batch queries.

Queries are built fully formed by :class:`~pilosa_orm.schema.Index` and
:class:`~pilosa_orm.schema.Field` and never raise. A builder that fails
returns a query whose ``error`` is set and whose serialized text is empty;
check ``error`` before handing the text to a transport.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pilosa_orm._errors import PilosaError
from pilosa_orm.pql import referenced_frames

if TYPE_CHECKING:
    from pilosa_orm.schema import Index


class PQLQuery(ABC):
    """A serializable PQL query bound to an index.

    The variants are closed: :class:`PQLBaseQuery`, :class:`PQLBitmapQuery`
    and :class:`PQLBatchQuery`.
    """

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(f"{cls.__qualname__}: PQLQuery cannot be subclassed")

    def __init__(self, index: Index | None, error: PilosaError | None = None) -> None:
        self._index = index
        self._error = error

    @property
    def index(self) -> Index | None:
        return self._index

    @property
    def error(self) -> PilosaError | None:
        return self._error

    @abstractmethod
    def serialize(self) -> str: ...

    def frames(self) -> list[str]:
        """Names of the fields this query reads or writes."""
        if self._error is not None:
            return []
        return referenced_frames(self.serialize())

    def __str__(self) -> str:
        return self.serialize()


class _SingleQuery(PQLQuery):
    def __init__(
        self, pql: str, index: Index | None, error: PilosaError | None = None
    ) -> None:
        super().__init__(index, error)
        self._pql = "" if error is not None else pql

    def serialize(self) -> str:
        return self._pql

    def __repr__(self) -> str:
        if self._error is not None:
            return f"{type(self).__name__}(error={self._error!r})"
        return f"{type(self).__name__}({self._pql!r})"


class PQLBaseQuery(_SingleQuery):
    """A query returning a scalar or void result."""


class PQLBitmapQuery(_SingleQuery):
    """A query returning a bitmap; can be nested in bitmap operations."""


class PQLBatchQuery(PQLQuery):
    """A batch of queries sent as a single request.

    Usage::

        repo = schema.index("repository")
        stargazer = repo.field("stargazer")
        query = repo.batch_query(
            stargazer.bitmap(5),
            stargazer.bitmap(15),
            repo.union(stargazer.bitmap(20), stargazer.bitmap(25)),
        )
    """

    def __init__(self, index: Index | None, *queries: PQLQuery) -> None:
        super().__init__(index)
        self._queries: list[str] = []
        for query in queries:
            self.add(query)

    def add(self, query: PQLQuery) -> None:
        """Append ``query``; the first error seen becomes the batch error."""
        if query.error is not None and self._error is None:
            self._error = query.error
        self._queries.append(query.serialize())

    def serialize(self) -> str:
        return "".join(self._queries)

    def __len__(self) -> int:
        return len(self._queries)

    def __repr__(self) -> str:
        return f"PQLBatchQuery({self._queries!r}, error={self._error!r})"
