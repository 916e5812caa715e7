from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .connection import DatabaseConnection
from .mysql_base import translate_errors

logger = logging.getLogger(__name__)


class MySQLTransactionManager:
    """One SERIALIZABLE transaction per ``atomic()`` block, bound to the thread.

    Nested blocks join the outer transaction.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, isolation_level: str = "SERIALIZABLE"):
        self._conn_factory = conn_factory
        self._isolation_level = isolation_level

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._conn_factory.bound_connection() is not None:
            yield
            return

        with translate_errors():
            conn = self._conn_factory.connect()
            conn.start_transaction(isolation_level=self._isolation_level)
        self._conn_factory.bind(conn)
        try:
            yield
            with translate_errors():
                conn.commit()
        except Exception:
            logger.debug("Rolling back transaction", exc_info=True)
            try:
                conn.rollback()
            except Exception:
                logger.exception("Rollback failed")
            raise
        finally:
            self._conn_factory.unbind()
            conn.close()
