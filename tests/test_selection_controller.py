import pytest

from models.session_models import (
    ContextMenuInfo,
    EditingMode,
    IdleMode,
    MenuOpenMode,
    SelectedMode,
)
from services.annotation_store import AnnotationStore
from services.errors import InvalidPageError
from services.selection_controller import SelectionController


@pytest.fixture
def store():
    store = AnnotationStore(num_pages=3)
    store.create(1, 10.0, 10.0)
    store.create(2, 20.0, 20.0)
    store.mark_clean()
    return store


@pytest.fixture
def selection(store):
    return SelectionController(store)


class TestSelection:
    def test_click_selects(self, selection):
        selection.click_annotation(1)
        assert selection.mode == SelectedMode(1)
        assert selection.selected_id == 1
        assert selection.menu is None

    def test_click_replaces_previous_selection(self, selection):
        selection.click_annotation(1)
        selection.click_annotation(2)
        assert selection.selected_id == 2

    def test_click_unknown_id_ignored(self, selection):
        selection.click_annotation(42)
        assert selection.mode == IdleMode()

    def test_background_click_clears_everything(self, selection):
        selection.click_annotation(1)
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.background_click()
        assert selection.mode == IdleMode()
        assert selection.selected_id is None
        assert selection.menu is None


class TestContextMenu:
    def test_menu_freezes_document_coordinates(self, selection):
        menu = selection.open_context_menu(500.0, 600.0, 150.0, 90.0, 2, 1.5)
        assert menu == ContextMenuInfo(screen_x=500.0, screen_y=600.0, document_x=100.0, document_y=60.0, page=2)

    def test_menu_keeps_selection(self, selection):
        selection.click_annotation(1)
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        assert isinstance(selection.mode, MenuOpenMode)
        assert selection.selected_id == 1

    def test_click_closes_menu(self, selection):
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.click_annotation(2)
        assert selection.mode == SelectedMode(2)

    def test_close_menu_restores_selection(self, selection):
        selection.click_annotation(2)
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.close_menu()
        assert selection.mode == SelectedMode(2)
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.background_click()
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.close_menu()
        assert selection.mode == IdleMode()

    def test_add_from_menu_creates_at_frozen_position(self, store, selection):
        selection.open_context_menu(0.0, 0.0, 80.0, 40.0, 3, 2.0)
        annotation = selection.add_annotation_from_menu()
        assert annotation is not None
        assert (annotation.page, annotation.x, annotation.y) == (3, 40.0, 20.0)
        assert annotation.is_new
        assert selection.mode == SelectedMode(annotation.id)
        assert selection.menu is None
        assert store.is_dirty

    def test_add_without_menu_returns_none(self, store, selection):
        assert selection.add_annotation_from_menu() is None
        assert len(store) == 2

    def test_add_on_invalid_page_raises(self, selection):
        selection.open_context_menu(0, 0, 0, 0, 7, 1.0)
        with pytest.raises(InvalidPageError):
            selection.add_annotation_from_menu()


class TestEditing:
    def test_begin_and_commit_edit(self, store, selection):
        selection.begin_edit(1)
        assert selection.mode == EditingMode(1)
        assert selection.editing_id == 1
        selection.commit_edit(1, r"$\alpha$")
        assert selection.mode == SelectedMode(1)
        assert store.get(1).content == r"$\alpha$"

    def test_delete_selected(self, store, selection):
        selection.click_annotation(1)
        assert selection.delete_selected() == 1
        assert store.get(1) is None
        assert selection.mode == IdleMode()

    def test_delete_selected_ignored_while_editing(self, store, selection):
        selection.begin_edit(1)
        assert selection.delete_selected() is None
        assert store.get(1) is not None

    def test_delete_clears_selection_of_deleted(self, store, selection):
        selection.click_annotation(2)
        selection.delete(2)
        assert selection.mode == IdleMode()
        assert store.get(2) is None

    def test_forget_while_menu_open(self, selection):
        selection.click_annotation(1)
        selection.open_context_menu(0, 0, 0, 0, 1, 1.0)
        selection.forget(1)
        assert isinstance(selection.mode, MenuOpenMode)
        assert selection.selected_id is None


class TestFontAdjust:
    def test_adjust_selected_font(self, store, selection):
        selection.click_annotation(1)
        assert selection.adjust_selected_font(2.0) is True
        assert store.get(1).font_size == 22.0

    def test_adjust_without_selection_returns_false(self, store, selection):
        assert selection.adjust_selected_font(2.0) is False
        assert store.is_dirty is False
