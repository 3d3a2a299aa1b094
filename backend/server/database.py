"""SQLite database — connection + schema."""

import sqlite3
import os
from server.config import DB_PATH


def get_db():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db():
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    conn = get_db()

    conn.executescript("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT UNIQUE,
            password_hash TEXT DEFAULT '',
            auth_token TEXT,
            created_at TEXT DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS user_stats (
            user_id INTEGER PRIMARY KEY,
            weak_topics TEXT DEFAULT '[]',
            mastery_level TEXT,
            test_date TEXT,
            updated_at TEXT DEFAULT (datetime('now')),
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS tests (
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            test_name TEXT NOT NULL,
            test_date TEXT NOT NULL,
            available_study_days TEXT DEFAULT '[]',
            topics TEXT DEFAULT '[]',
            created_at TEXT DEFAULT (datetime('now')),
            FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS plan_days (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            test_id TEXT NOT NULL,
            day_date TEXT NOT NULL,
            FOREIGN KEY (test_id) REFERENCES tests(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS plan_tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            plan_day_id INTEGER NOT NULL,
            test_id TEXT NOT NULL,
            topic_title TEXT NOT NULL,
            description TEXT NOT NULL,
            sort_order INTEGER DEFAULT 0,
            completed INTEGER DEFAULT 0,
            FOREIGN KEY (plan_day_id) REFERENCES plan_days(id) ON DELETE CASCADE,
            FOREIGN KEY (test_id) REFERENCES tests(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS resources (
            id TEXT PRIMARY KEY,
            category TEXT NOT NULL,
            title TEXT,
            url TEXT NOT NULL,
            description TEXT DEFAULT '',
            type TEXT DEFAULT 'guide'
        );

        CREATE INDEX IF NOT EXISTS idx_users_token ON users(auth_token);
        CREATE INDEX IF NOT EXISTS idx_tests_user ON tests(user_id);
        CREATE INDEX IF NOT EXISTS idx_plan_days_test ON plan_days(test_id, day_date);
        CREATE INDEX IF NOT EXISTS idx_plan_tasks_day ON plan_tasks(plan_day_id);
        CREATE INDEX IF NOT EXISTS idx_resources_category ON resources(category);
    """)

    conn.commit()
    conn.close()
