"""Tests for portal.audit.access_log — uses mocked DB connections."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from portal.audit.access_log import (
    REVEAL,
    count_access,
    recent_access,
    record_access,
)
from portal.db.connection import reset_connection_factory, set_connection_factory
from portal.errors import AuditWriteError


@pytest.fixture(autouse=True)
def clean_factory():
    """Reset connection factory between tests."""
    reset_connection_factory()
    yield
    reset_connection_factory()


def _mock_conn(fetchone_return=None, fetchall_return=None):
    """Create a mock connection with cursor."""
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value = cursor
    if fetchone_return is not None:
        cursor.fetchone.return_value = fetchone_return
    if fetchall_return is not None:
        cursor.fetchall.return_value = fetchall_return
    return conn, cursor


class TestRecordAccess:
    def test_successful_write(self):
        ts = datetime(2026, 3, 1, 9, 30, 0)
        conn, cursor = _mock_conn(fetchone_return=(42, ts))
        set_connection_factory(lambda: conn)

        result = record_access("user-1", "cred-1")
        assert result == {"id": 42, "createdAt": ts.isoformat()}
        cursor.execute.assert_called_once()
        sql, params = cursor.execute.call_args[0]
        assert "INSERT INTO secret_access_logs" in sql
        assert params == ("user-1", "cred-1", REVEAL)
        conn.commit.assert_called_once()

    def test_unknown_action_rejected(self):
        conn, cursor = _mock_conn()
        set_connection_factory(lambda: conn)
        with pytest.raises(ValueError, match="Unknown access action"):
            record_access("user-1", "cred-1", "VIEW")
        cursor.execute.assert_not_called()

    def test_insert_failure_raises(self):
        conn, cursor = _mock_conn()
        cursor.execute.side_effect = Exception("disk full")
        set_connection_factory(lambda: conn)

        with pytest.raises(AuditWriteError):
            record_access("user-1", "cred-1")
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_commit_failure_raises(self):
        conn, _ = _mock_conn(fetchone_return=(1, datetime(2026, 3, 1)))
        conn.commit.side_effect = Exception("serialization failure")
        set_connection_factory(lambda: conn)

        with pytest.raises(AuditWriteError):
            record_access("user-1", "cred-1")
        conn.rollback.assert_called_once()

    def test_connection_failure_raises(self):
        def no_db():
            raise ConnectionError("pool exhausted")

        set_connection_factory(no_db)
        with pytest.raises(AuditWriteError):
            record_access("user-1", "cred-1")

    def test_error_message_is_public(self):
        conn, cursor = _mock_conn()
        cursor.execute.side_effect = Exception("relation secret_access_logs does not exist")
        set_connection_factory(lambda: conn)

        with pytest.raises(AuditWriteError) as exc_info:
            record_access("user-1", "cred-1")
        assert "relation" not in exc_info.value.message


class TestRecentAccess:
    def test_newest_first_query(self):
        conn, cursor = _mock_conn(fetchall_return=[])
        set_connection_factory(lambda: conn)

        assert recent_access(limit=5) == []
        sql, params = cursor.execute.call_args[0]
        assert "ORDER BY l.created_at DESC" in sql
        assert params == [5]

    def test_filter_by_credential(self):
        conn, cursor = _mock_conn(fetchall_return=[])
        set_connection_factory(lambda: conn)

        recent_access(limit=10, credential_id="cred-9")
        sql, params = cursor.execute.call_args[0]
        assert "l.credential_id = %s" in sql
        assert params == ["cred-9", 10]

    def test_row_shape(self):
        ts = datetime(2026, 3, 1, 9, 30, 0)
        row = {
            "id": 7,
            "user_id": "user-1",
            "credential_id": "cred-1",
            "action": "REVEAL",
            "created_at": ts,
            "user_email": "alice@example.com",
            "credential_label": "Registrar",
        }
        conn, _ = _mock_conn(fetchall_return=[row])
        set_connection_factory(lambda: conn)

        events = recent_access()
        assert events == [
            {
                "id": 7,
                "userId": "user-1",
                "userEmail": "alice@example.com",
                "credentialId": "cred-1",
                "credentialLabel": "Registrar",
                "action": "REVEAL",
                "createdAt": ts.isoformat(),
            }
        ]


class TestCountAccess:
    def test_count_all(self):
        conn, cursor = _mock_conn(fetchone_return=(12,))
        set_connection_factory(lambda: conn)
        assert count_access() == 12
        assert "WHERE" not in cursor.execute.call_args[0][0]

    def test_count_for_credential(self):
        conn, cursor = _mock_conn(fetchone_return=(3,))
        set_connection_factory(lambda: conn)
        assert count_access("cred-1") == 3
        assert cursor.execute.call_args[0][1] == ("cred-1",)
