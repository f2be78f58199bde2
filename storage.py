# storage.py
"""
Optional PostgreSQL persistence for leads and newsletter subscribers.

Everything here is best-effort: with no DATABASE_URL the functions are no-ops,
and database errors are logged and reported as False.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from psycopg2 import pool
from psycopg2.extras import Json

import config

logger = logging.getLogger("readiness.storage")

_db_pool: Optional[pool.ThreadedConnectionPool] = None


DDL = """
CREATE TABLE IF NOT EXISTS readiness_leads (
  lead_id UUID PRIMARY KEY,
  created_at TIMESTAMPTZ NOT NULL,
  full_name TEXT NOT NULL,
  email TEXT NOT NULL,
  readiness_score INT NOT NULL,
  tier TEXT NOT NULL,
  answers JSONB,

  ip_address TEXT,
  user_agent TEXT,

  email_sent BOOLEAN DEFAULT FALSE
);

CREATE INDEX IF NOT EXISTS idx_readiness_leads_created_at ON readiness_leads(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_readiness_leads_email ON readiness_leads(email);

CREATE TABLE IF NOT EXISTS newsletter_subscribers (
  email TEXT PRIMARY KEY,
  subscribed_at TIMESTAMPTZ NOT NULL,
  ip_address TEXT
);
"""


def init_db_pool() -> None:
    global _db_pool
    s = config.settings
    if not s.database_enabled or _db_pool:
        return
    _db_pool = pool.ThreadedConnectionPool(minconn=s.DB_POOL_MIN, maxconn=s.DB_POOL_MAX, dsn=s.DATABASE_URL)
    logger.info("DB pool initialized (min=%s max=%s)", s.DB_POOL_MIN, s.DB_POOL_MAX)


def close_db_pool() -> None:
    global _db_pool
    if _db_pool:
        try:
            _db_pool.closeall()
        except Exception:
            logger.exception("Error closing DB pool")
    _db_pool = None


def get_db_conn():
    if not _db_pool:
        return None
    try:
        return _db_pool.getconn()
    except Exception:
        logger.exception("Failed to get DB connection")
        return None


def return_db_conn(conn):
    if _db_pool and conn:
        try:
            _db_pool.putconn(conn)
        except Exception:
            logger.exception("Failed to return DB connection")


def ensure_tables() -> None:
    conn = None
    try:
        conn = get_db_conn()
        if not conn:
            return
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute(DDL)
        logger.info("DB tables ready")
    except Exception:
        logger.exception("Failed ensuring tables")
    finally:
        return_db_conn(conn)


def _execute(sql: str, params: tuple, what: str) -> bool:
    conn = None
    try:
        conn = get_db_conn()
        if not conn:
            return False
        with conn.cursor() as cur:
            cur.execute(sql, params)
        conn.commit()
        return True
    except Exception:
        logger.exception("Failed inserting %s", what)
        if conn:
            try:
                conn.rollback()
            except Exception:
                logger.exception("Rollback failed")
        return False
    finally:
        return_db_conn(conn)


def insert_lead(
    *,
    lead_id: uuid.UUID,
    created_at: datetime,
    full_name: str,
    email: str,
    readiness_score: int,
    tier: str,
    answers: Optional[Dict[str, Any]],
    ip_address: Optional[str],
    user_agent: Optional[str],
    email_sent: bool,
) -> bool:
    if not config.settings.database_enabled:
        return False

    sql = """
    INSERT INTO readiness_leads (
      lead_id, created_at, full_name, email, readiness_score, tier,
      answers, ip_address, user_agent, email_sent
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s);
    """
    return _execute(
        sql,
        (
            str(lead_id),
            created_at,
            full_name,
            email,
            int(readiness_score),
            tier,
            Json(answers) if answers is not None else None,
            ip_address,
            user_agent,
            bool(email_sent),
        ),
        "lead",
    )


def insert_subscriber(*, email: str, subscribed_at: datetime, ip_address: Optional[str]) -> bool:
    if not config.settings.database_enabled:
        return False

    sql = """
    INSERT INTO newsletter_subscribers (email, subscribed_at, ip_address)
    VALUES (%s, %s, %s)
    ON CONFLICT (email) DO NOTHING;
    """
    return _execute(sql, (email.lower(), subscribed_at, ip_address), "newsletter subscriber")
