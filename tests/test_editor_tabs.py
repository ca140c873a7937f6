"""Tests for app.editor_tabs and the editor actions it hosts."""

from pathlib import Path

import pytest
from PyQt6.QtCore import Qt
from PyQt6.QtTest import QTest

from app.editor_tabs import DocumentTab, EditorTabWidget


@pytest.fixture
def tabs(qapp):
    widget = EditorTabWidget(font_size=11, spell_check=False)
    yield widget
    widget.deleteLater()


class TestTabManagement:
    def test_starts_with_one_blank_tab(self, tabs):
        assert tabs.tab_count() == 1
        assert isinstance(tabs.current(), DocumentTab)
        assert tabs.current().is_blank()

    def test_add_tab_becomes_current(self, tabs):
        first = tabs.current()
        second = tabs.add_tab()
        assert tabs.tab_count() == 2
        assert tabs.current() is second
        assert tabs.index_of(first) == 0

    def test_last_tab_is_replaced(self, tabs):
        only = tabs.current()
        tabs.remove_tab(0)
        assert tabs.tab_count() == 1
        assert tabs.current() is not only

    def test_reusable_tab(self, tabs):
        blank = tabs.current()
        assert tabs.reusable_tab() is blank
        blank.set_text("content")
        other = tabs.reusable_tab()
        assert other is not blank
        assert tabs.tab_count() == 2

    def test_find_path(self, tabs, tmp_path):
        tab = tabs.current()
        tab.path = tmp_path / "a.md"
        assert tabs.find_path(tmp_path / "a.md") is tab
        assert tabs.find_path(tmp_path / "b.md") is None

    def test_title_marks_modified(self, tabs):
        tab = tabs.current()
        tab.path = Path("/docs/notes.md")
        tab.set_text("x")
        tab.insert_text("y")
        assert tabs._tabs.tabText(0) == "*notes.md"
        tab.set_modified(False)
        tabs.refresh_title(tab)
        assert tabs._tabs.tabText(0) == "notes.md"

    def test_font_size_applies_to_every_tab(self, tabs):
        tabs.add_tab()
        tabs.set_font_size(17)
        assert all(t._text.font().pointSize() == 17 for t in tabs.tabs())
        assert tabs.add_tab()._text.font().pointSize() == 17


class TestSignalRouting:
    def test_only_current_tab_is_forwarded(self, tabs):
        background = tabs.current()
        front = tabs.add_tab()
        seen = []
        tabs.text_changed.connect(lambda: seen.append("text"))
        background.set_text("hidden")
        assert seen == []
        front.set_text("shown")
        assert seen

    def test_current_changed_carries_tab(self, tabs):
        first = tabs.current()
        tabs.add_tab()
        seen = []
        tabs.current_changed.connect(seen.append)
        tabs.set_current(first)
        assert seen == [first]

    def test_close_is_left_to_owner(self, tabs):
        requested = []
        tabs.close_requested.connect(requested.append)
        tabs._tabs.tabCloseRequested.emit(0)
        assert requested == [0]
        assert tabs.tab_count() == 1


class TestEditorActions:
    def test_format_paragraphs(self, tabs):
        tab = tabs.current()
        tab.set_text("aaa bbb ccc\n\n# h h h")
        tab.format_paragraphs(3)
        assert tab.get_text() == "aaa\nbbb\nccc\n\n# h h h"

    def test_format_unchanged_text_is_not_modified(self, tabs):
        tab = tabs.current()
        tab.set_text("short")
        tab.format_paragraphs(80)
        assert not tab.is_modified()

    def test_enter_on_empty_item_ends_list(self, tabs):
        tab = tabs.current()
        tab.set_text("- one\n- ")
        tab.go_to_offset(len("- one\n- "))
        QTest.keyClick(tab._text, Qt.Key.Key_Return)
        assert tab.get_text() == "- one\n\n"

    def test_enter_continues_list(self, tabs):
        tab = tabs.current()
        tab.set_text("1. one")
        tab.go_to_offset(len("1. one"))
        QTest.keyClick(tab._text, Qt.Key.Key_Return)
        assert tab.get_text() == "1. one\n2. "
