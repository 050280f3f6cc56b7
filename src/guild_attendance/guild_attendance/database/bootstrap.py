from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_MAINS
from ..core.enums import Role
from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)


def _connect(target: DBConfig, *, with_database: bool = True):
    # fresh factory: bootstrap may run before the app-wide singleton exists
    return DatabaseConnection(target).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quotes, dropping ``--`` line comments."""
    current: list[str] = []
    quote: Optional[str] = None
    i, n = 0, len(sql)

    while i < n:
        ch = sql[i]
        if quote:
            current.append(ch)
            if ch == "\\" and i + 1 < n:
                current.append(sql[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
            current.append(ch)
        elif sql.startswith("--", i):
            eol = sql.find("\n", i)
            i = n if eol == -1 else eol
            continue
        elif ch == ";":
            statement = "".join(current).strip()
            if statement:
                yield statement
            current = []
        else:
            current.append(ch)
        i += 1

    statement = "".join(current).strip()
    if statement:
        yield statement


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    schema_path = Path(schema_path)
    sql = _strip_create_db_and_use(schema_path.read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s to %s", schema_path, target.database)


def ensure_default_mains(db_config: dict, mains: Sequence[tuple[str, str]]) -> int:
    """Insert the given (name, description) mains that are not present yet."""
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    added = 0
    try:
        cur = conn.cursor()
        for name, description in mains:
            cur.execute("INSERT IGNORE INTO mains (name, description) VALUES (%s, %s)", (name, description))
            if cur.rowcount > 0:
                added += 1
                logger.info("Added main event: %s", name)
        conn.commit()
    finally:
        conn.close()
    return added


def ensure_owner_account(db_config: dict, *, username: str, password: str, email: str | None = None) -> None:
    """Create the owner account, or reset its password and role if it exists."""
    if not username or not password:
        raise ValueError("Owner username and password are required")

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT id FROM roles WHERE role_name=%s", (Role.OWNER.value,))
        role = cur.fetchone()
        if not role:
            raise RuntimeError("Owner role not found; apply schema.sql first")

        password_hash = generate_password_hash(password)
        cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
        existing = cur.fetchone()
        if existing:
            cur.execute(
                "UPDATE users SET password_hash=%s, role_id=%s, email=COALESCE(%s, email) WHERE user_id=%s",
                (password_hash, int(role["id"]), email, int(existing["user_id"])),
            )
            logger.info("Updated existing owner account: %s", username)
        else:
            cur.execute(
                "INSERT INTO users (username, password_hash, email, role_id) VALUES (%s, %s, %s, %s)",
                (username, password_hash, email, int(role["id"])),
            )
            logger.info("Created owner account: %s", username)
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def seed_defaults(
    db_config: dict,
    *,
    owner_username: str | None = None,
    owner_password: str | None = None,
    owner_email: str | None = None,
) -> int:
    """Default mains plus, when credentials are configured, the owner account."""
    added = ensure_default_mains(db_config, DEFAULT_MAINS)
    if owner_username and owner_password:
        ensure_owner_account(db_config, username=owner_username, password=owner_password, email=owner_email)
    else:
        logger.warning("OWNER_USERNAME/OWNER_PASSWORD not set; skipping owner account")
    return added
