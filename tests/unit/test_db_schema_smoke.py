import sqlite3

import pytest


def test_dbconnection_creates_core_tables(conn):
    conn.cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    table_names = {row[0] for row in conn.cursor.fetchall()}

    assert {
        "users",
        "parking_lots",
        "parking_lots_coordinates",
        "parking_rates",
        "vehicles",
        "sessions",
        "invoices",
        "overdue_charges",
    } <= table_names


def test_available_spots_can_not_exceed_total(conn, make_lot):
    lot = make_lot(total_spots=2)
    with pytest.raises(sqlite3.IntegrityError):
        conn.cursor.execute("UPDATE parking_lots SET available_spots = 3 WHERE id = ?", [lot.id])
    conn.connection.rollback()


def test_tables_survive_reconnect(tmp_path):
    from AutoPark.api.DBConnection import DBConnection

    path = str(tmp_path / "again.db")
    DBConnection(path).close_connection()
    again = DBConnection(path)
    again.cursor.execute("SELECT COUNT(*) FROM parking_rates")
    assert again.cursor.fetchone()[0] == 0
    again.close_connection()
