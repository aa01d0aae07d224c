import json
import sqlite3
from datetime import datetime
from pathlib import Path

import pandas as pd

BASE_DIR = Path(__file__).resolve().parent
DB_PATH = BASE_DIR / "puzzle_rounds.db"

def get_conn(db_path=None):
    return sqlite3.connect(db_path or DB_PATH)

def _now():
    return datetime.now().isoformat(timespec="seconds")

def init_rounds_db(db_path=None):
    conn = get_conn(db_path)
    conn.execute("""
    CREATE TABLE IF NOT EXISTS Modules (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT
    );
    """)
    conn.execute("""
    CREATE TABLE IF NOT EXISTS PuzzleRounds (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        module_id INTEGER NOT NULL,
        top_value INTEGER NOT NULL,
        modulus INTEGER NOT NULL,
        expected INTEGER NOT NULL,
        trace TEXT NOT NULL,
        created_at TEXT,
        resolved_at TEXT,
        outcome TEXT
    );
    """)
    conn.execute("""
    CREATE TABLE IF NOT EXISTS ButtonPresses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        round_id INTEGER NOT NULL REFERENCES PuzzleRounds(id),
        pressed TEXT NOT NULL,
        correct INTEGER NOT NULL,
        created_at TEXT
    );
    """)
    conn.commit()
    conn.close()


# ========== Puzzle page uses these ==========
def next_module_id(db_path=None) -> int:
    # Reserve the id with its own row so concurrent sessions never share one
    conn = get_conn(db_path)
    cur = conn.execute("INSERT INTO Modules (created_at) VALUES (?)", (_now(),))
    conn.commit()
    module_id = cur.lastrowid
    conn.close()
    return module_id

def record_round(module_id, top_value, modulus, expected, trace, db_path=None) -> int:
    conn = get_conn(db_path)
    cur = conn.execute("""
        INSERT INTO PuzzleRounds
        (module_id, top_value, modulus, expected, trace, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
    """, (module_id, top_value, modulus, int(expected), json.dumps(trace, ensure_ascii=False), _now()))
    conn.commit()
    round_id = cur.lastrowid
    conn.close()
    return round_id

def record_press(round_id, pressed, correct, db_path=None):
    conn = get_conn(db_path)
    conn.execute("""
        INSERT INTO ButtonPresses (round_id, pressed, correct, created_at)
        VALUES (?, ?, ?, ?)
    """, (round_id, pressed, int(correct), _now()))
    conn.commit()
    conn.close()

def resolve_round(round_id, outcome, db_path=None):
    if outcome not in ("solved", "strike"):
        raise ValueError(f"Unknown outcome: {outcome}")

    conn = get_conn(db_path)
    conn.execute("""
        UPDATE PuzzleRounds SET outcome=?, resolved_at=? WHERE id=?
    """, (outcome, _now(), round_id))
    conn.commit()
    conn.close()


# ========== History page uses these ==========
def get_round_history(outcome=None, db_path=None) -> pd.DataFrame:
    conn = get_conn(db_path)

    query = """
        SELECT r.id, r.module_id, r.top_value, r.modulus, r.expected, r.outcome,
               COUNT(b.id) AS presses, r.created_at, r.resolved_at
        FROM PuzzleRounds r
        LEFT JOIN ButtonPresses b ON b.round_id = r.id
    """
    params = ()
    if outcome == "open":
        query += " WHERE r.outcome IS NULL"
    elif outcome and outcome != "All":
        query += " WHERE r.outcome = ?"
        params = (outcome,)
    query += " GROUP BY r.id ORDER BY r.id DESC"

    df = pd.read_sql_query(query, conn, params=params)
    conn.close()

    df["expected"] = df["expected"].map({1: "R", 0: "N"})
    return df

def get_round_by_id(round_id, db_path=None):
    conn = get_conn(db_path)
    row = conn.execute("""
        SELECT id, module_id, top_value, modulus, expected, trace, created_at, resolved_at, outcome
        FROM PuzzleRounds WHERE id=?
    """, (round_id,)).fetchone()

    if not row:
        conn.close()
        return None

    presses = conn.execute("""
        SELECT pressed, correct, created_at
        FROM ButtonPresses WHERE round_id=? ORDER BY id
    """, (round_id,)).fetchall()
    conn.close()

    return {
        "id": row[0],
        "module_id": row[1],
        "top": row[2],
        "modulus": row[3],
        "expected": bool(row[4]),
        "trace": json.loads(row[5] or "[]"),
        "created_at": row[6],
        "resolved_at": row[7],
        "outcome": row[8],
        "presses": [
            {"pressed": p[0], "correct": bool(p[1]), "created_at": p[2]}
            for p in presses
        ],
    }

def get_module_stats(module_id, db_path=None):
    conn = get_conn(db_path)
    row = conn.execute("""
        SELECT COUNT(*),
               SUM(CASE WHEN outcome = 'solved' THEN 1 ELSE 0 END),
               SUM(CASE WHEN outcome = 'strike' THEN 1 ELSE 0 END)
        FROM PuzzleRounds WHERE module_id=?
    """, (module_id,)).fetchone()
    conn.close()

    return {
        "rounds": row[0],
        "solved": row[1] or 0,
        "strikes": row[2] or 0,
    }
