"""Relational database connection, schema migration and SQL dump import/export."""

import subprocess
from datetime import datetime
from pathlib import Path
from typing import List
from urllib.parse import parse_qsl

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from blogserver.config import LogLevel, Mysql
from blogserver.models import Base

DUMP_HOST = "root@192.168.24.101"
DEFAULT_IDLE_CONNECTIONS = 2

_DRIVER_OPTIONS = {"charset"}


def create_db_engine(mysql: Mysql) -> Engine:
    """Engine for the configured MySQL database; connections open lazily."""
    query = {
        key: value
        for key, value in parse_qsl(mysql.config, keep_blank_values=True)
        if key in _DRIVER_OPTIONS
    }
    url = URL.create(
        "mysql+pymysql",
        username=mysql.username,
        password=mysql.password,
        host=mysql.host,
        port=mysql.port or None,
        database=mysql.db_name,
        query=query,
    )
    pool_size = mysql.max_idle_conns if mysql.max_idle_conns > 0 else DEFAULT_IDLE_CONNECTIONS
    if mysql.max_open_conns > 0:
        pool_size = min(pool_size, mysql.max_open_conns)
        max_overflow = mysql.max_open_conns - pool_size
    else:
        max_overflow = -1
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        echo=mysql.log_level() >= LogLevel.INFO,
    )


def migrate(engine: Engine) -> None:
    """Create every missing table, using the InnoDB engine on MySQL."""
    for table in Base.metadata.tables.values():
        table.dialect_kwargs["mysql_engine"] = "InnoDB"
    Base.metadata.create_all(engine)


def split_sql(text: str) -> List[str]:
    """Split a script on semicolons into non-empty, stripped statements."""
    return [statement for statement in (part.strip() for part in text.split(";")) if statement]


def import_sql(engine: Engine, path: "str | Path") -> List[SQLAlchemyError]:
    """Run each statement of a SQL file; returns the errors of statements that failed.

    A file that cannot be read raises ``OSError``.
    """
    text = Path(path).read_text(encoding="utf-8")
    errors: List[SQLAlchemyError] = []
    for statement in split_sql(text):
        try:
            with engine.begin() as connection:
                connection.exec_driver_sql(statement)
        except SQLAlchemyError as exc:
            errors.append(exc)
    return errors


def export_sql(mysql: Mysql, directory: "str | Path" = ".") -> Path:
    """Dump the database over ssh into ``mysql_YYYYMMDD.sql``; returns its path.

    Raises ``subprocess.CalledProcessError`` if the dump fails.
    """
    path = Path(directory) / f"mysql_{datetime.now():%Y%m%d}.sql"
    remote = (
        f"docker exec mysql mysqldump -u{mysql.username} -p{mysql.password} {mysql.db_name}"
    )
    with path.open("wb") as out:
        subprocess.run(["ssh", DUMP_HOST, remote], stdout=out, check=True)
    return path