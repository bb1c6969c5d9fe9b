"""
Smoke tests for the Streamlit pages.

The app runs headless through streamlit's AppTest against a temporary
data file; nothing touches the real ledger.
"""

import json
from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

from ledger.config import get_settings


APP_PATH = Path(__file__).resolve().parent.parent / "app" / "main.py"

RECORD = {
    "id": "txn_1",
    "description": "Lunch at Cafeteria",
    "amount": 12.5,
    "category": "Food",
    "date": "2025-01-31",
    "createdAt": "2025-01-31T12:00:00.000Z",
    "updatedAt": "2025-01-31T12:00:00.000Z",
}


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "finance_data.json"
    monkeypatch.setenv("LEDGER_DATA_FILE", str(path))
    get_settings.cache_clear()
    st.cache_resource.clear()
    yield path
    get_settings.cache_clear()
    st.cache_resource.clear()


def open_page(label: str) -> AppTest:
    at = AppTest.from_file(str(APP_PATH), default_timeout=30)
    at.run()
    at.sidebar.radio[0].set_value(label).run()
    return at


class TestRecordsPage:
    """Tests for the records list."""

    def test_duplicate_ids_render(self, data_file):
        """Test records sharing an id (export then import) all render."""
        data_file.write_text(
            json.dumps({"finance:records_v1": json.dumps([RECORD, RECORD])}),
            encoding="utf-8",
        )
        at = open_page("📋 Records")

        assert not at.exception
        assert len([b for b in at.button if b.label == "Edit"]) == 2
        assert len([b for b in at.button if b.label == "Delete"]) == 2

    def test_empty_ledger(self, data_file):
        at = open_page("📋 Records")
        assert not at.exception
        assert at.info[0].value == "No transactions yet."


class TestStartup:
    """Tests for loading the data file at startup."""

    def test_non_utf8_data_file_starts_empty(self, data_file):
        data_file.write_bytes(b'{"finance:records_v1": "\xff\xfe"}')
        at = open_page("📋 Records")
        assert not at.exception
        assert at.info[0].value == "No transactions yet."


class TestSettingsPage:
    """Tests for the settings page."""

    def test_recent_activity_is_shown(self, data_file):
        at = open_page("⚙️ Settings")
        assert not at.exception
        assert "records_exported" in at.code[0].value


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
