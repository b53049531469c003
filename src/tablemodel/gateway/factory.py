from __future__ import annotations

from typing import Any, Dict, Optional, Type

from sqlalchemy.engine import make_url

from tablemodel.settings import settings
from .adapter import SQLAlchemyGateway
from .mysql import MysqlGateway
from .sqlite import SqliteGateway


class UnsupportedDialectError(ValueError):
    pass


GATEWAYS: Dict[str, Type[SQLAlchemyGateway]] = {
    "sqlite": SqliteGateway,
    "mysql": MysqlGateway,
    "mariadb": MysqlGateway,
}


def create_gateway(url: Optional[str] = None, **kwargs: Any) -> SQLAlchemyGateway:
    """
    Create a gateway for a SQLAlchemy URL.
    Falls back to TABLEMODEL_DATABASE_URL when no URL is given; extra keyword
    arguments (table_prefix, charset, collate, engine_options) go to the gateway.
    """
    url = url or settings.database_url
    if not url:
        raise ValueError("A database URL is required (pass one or set TABLEMODEL_DATABASE_URL)")

    backend = make_url(url).get_backend_name().lower()
    if backend not in GATEWAYS:
        raise UnsupportedDialectError(
            f"Unsupported dialect: '{backend}'. Available: {sorted(GATEWAYS)}"
        )
    return GATEWAYS[backend](url, **kwargs)
