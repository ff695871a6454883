# backend/db.py
import os
import sqlite3

from flask import current_app, g

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "expense.db")
SCHEMA_FILE = os.path.join(os.path.dirname(__file__), "init_db.sql")


def _db_path():
    return current_app.config.get("DB_PATH") or DEFAULT_DB_PATH


def _connect(path):
    # ensure directory exists
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_db():
    db = getattr(g, '_database', None)
    if db is None:
        db = g._database = _connect(_db_path())
        db.row_factory = sqlite3.Row
    return db


def close_db(exception=None):
    db = g.pop('_database', None)
    if db is not None:
        db.close()


def query_db(query, args=(), one=False):
    cur = get_db().execute(query, args)
    rv = cur.fetchall()
    cur.close()
    return (rv[0] if rv else None) if one else rv


def execute_db(query, args=()):
    """Run a single write statement and commit. Returns the new row id."""
    conn = get_db()
    cur = conn.cursor()
    cur.execute(query, args)
    conn.commit()
    last = cur.lastrowid
    cur.close()
    return last


def modify_db(query, args=()):
    """Run an UPDATE/DELETE and commit. Returns the number of rows it touched."""
    conn = get_db()
    cur = conn.cursor()
    cur.execute(query, args)
    conn.commit()
    count = cur.rowcount
    cur.close()
    return count


def init_db(path=None):
    """
    Initialize the SQLite database using init_db.sql located in the same backend folder.
    This is idempotent (uses IF NOT EXISTS in SQL) so safe to call at app startup.
    """
    if not os.path.exists(SCHEMA_FILE):
        raise FileNotFoundError(f"init_db.sql not found at expected path: {SCHEMA_FILE}")

    conn = _connect(path or _db_path())
    try:
        with open(SCHEMA_FILE, 'r', encoding='utf-8') as f:
            sql = f.read()
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()
