"""Handle to the monitored database, as seen by collectors."""

from __future__ import annotations

from src.querystats.engines.base import BaseEngine


class DatabaseInstance:
    """Wrap the engine that owns the live connection to one server.

    Collectors only ever call :meth:`get_db`; connecting, reconnecting and
    closing stay with whoever created the engine.
    """

    def __init__(self, engine: BaseEngine, *, name: str = "default"):
        if engine is None:
            raise ValueError(f"instance {name!r} needs a database engine")
        self.name = name
        self._engine = engine

    def get_db(self) -> BaseEngine:
        return self._engine

    def __repr__(self) -> str:  # pragma: no cover
        return f"<DatabaseInstance name={self.name!r} engine={self._engine!r}>"
