import os
import threading
import time

import pytest

pytest.importorskip("PyQt6.QtWidgets")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QObject, QPoint, Qt, pyqtSignal  # noqa: E402
from PyQt6.QtTest import QTest  # noqa: E402
from PyQt6.QtWidgets import QApplication, QMessageBox  # noqa: E402

from services.settings_service import SettingsService  # noqa: E402
from services.storage_service import StorageService  # noqa: E402
from ui.async_bridge import AsyncBridge  # noqa: E402
from ui.main_window import MainWindow  # noqa: E402
from utils.constants import DEFAULT_LANGUAGE, UI_TEXTS  # noqa: E402
from utils.i18n import set_language  # noqa: E402


class Emitter(QObject):
    fired = pyqtSignal(str)


def run_until(app, condition, timeout=5.0):
    """条件が満たされるまでQtのイベントを処理する。"""
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("timed out waiting for the event loop")
        app.processEvents()
        time.sleep(0.005)


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def bridge(qapp):
    bridge = AsyncBridge()
    yield bridge
    bridge.close()


@pytest.fixture
def window(qapp, bridge, backend, tmp_path):
    backend.add_document("/docs/a.pdf", ["first theorem", "second"])
    backend.add_document("/docs/b.pdf", ["other"])
    settings_service = SettingsService(StorageService(str(tmp_path)))
    window = MainWindow(settings_service, backend, bridge)
    window.show()
    yield window
    window._closing_confirmed = True
    window.close()
    set_language(DEFAULT_LANGUAGE)


def open_document(qapp, window, path):
    task = window.bridge.run(window.pdf_handler._open(path))
    run_until(qapp, task.done)
    assert task.result() is None
    assert window.session.path == path


class TestAsyncBridge:
    def test_run_in_thread_uses_worker_thread(self, qapp, bridge):
        main_thread = threading.get_ident()

        async def call():
            return await bridge.run_in_thread(threading.get_ident)

        task = bridge.run(call())
        run_until(qapp, task.done)
        assert task.result() != main_thread

    def test_run_in_thread_propagates_exception(self, qapp, bridge):
        def fail(message):
            raise ValueError(message)

        async def call():
            return await bridge.run_in_thread(fail, "broken page")

        task = bridge.run(call())
        run_until(qapp, task.done)
        with pytest.raises(ValueError, match="broken page"):
            task.result()

    def test_waiting_for_signal_does_not_block_other_tasks(self, qapp, bridge):
        emitter = Emitter()

        async def wait():
            return await bridge.wait_signal(emitter.fired)

        async def other():
            return "done"

        waiting = bridge.run(wait())
        finished = bridge.run(other())
        run_until(qapp, finished.done)
        assert not waiting.done()

        emitter.fired.emit("closed")
        run_until(qapp, waiting.done)
        assert waiting.result() == ("closed",)


class TestDialogs:
    def test_confirm_dialog_keeps_loop_running(self, qapp, window):
        confirm = window.bridge.run(window._confirm("discard?"))
        run_until(qapp, lambda: window.findChildren(QMessageBox))
        [box] = [b for b in window.findChildren(QMessageBox) if b.isVisible()]

        other = window.bridge.run(window.session.search(""))
        run_until(qapp, other.done)
        assert not confirm.done()

        box.button(QMessageBox.StandardButton.Yes).click()
        run_until(qapp, confirm.done)
        assert confirm.result() is True


class TestStartup:
    def test_startup_file_opens_through_session(self, qapp, window, backend):
        backend.startup_file = "/docs/b.pdf"
        task = window.bridge.run(window.pdf_handler.open_startup_file())
        run_until(qapp, task.done)
        assert window.session.path == "/docs/b.pdf"
        assert window.page_label.text() == "/ 1"

    def test_no_startup_file_keeps_empty_state(self, qapp, window):
        task = window.bridge.run(window.pdf_handler.open_startup_file())
        run_until(qapp, task.done)
        assert window.session.path is None
        assert not window.save_action.isEnabled()


class TestSearchInput:
    def test_query_is_passed_unchanged(self, qapp, window):
        open_document(qapp, window, "/docs/a.pdf")
        window.search_handler.on_query_changed(" theorem")
        assert window.search_handler._pending_query == " theorem"
        run_until(qapp, lambda: window.sidebar._search_query == " theorem")
        assert [r.page for r in window.sidebar._search_results] == [1]


class TestBackgroundClick:
    def test_click_on_grey_area_clears_selection(self, qapp, window):
        open_document(qapp, window, "/docs/a.pdf")
        store, selection = window.session.store, window.session.selection
        annotation = store.create(1, 10.0, 10.0)
        store.update(annotation.id, "x")
        selection.click_annotation(annotation.id)
        assert selection.selected_id == annotation.id

        viewport = window.pdf_scroll_area.viewport()
        corner = QPoint(viewport.width() - 2, viewport.height() - 2)
        assert not window.pdf_display_label.geometry().contains(corner)
        QTest.mouseClick(viewport, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, corner)
        assert selection.selected_id is None


class TestLanguage:
    def test_switching_language_relabels_and_persists(self, qapp, window, tmp_path):
        window.language_combo.setCurrentIndex(window.language_combo.findData("en"))
        assert window.open_action.text() == "📂 Open"
        assert window.prev_page_button.text() == "◀ Prev"
        assert window.sidebar.search_input.placeholderText() == UI_TEXTS["en"]["search_placeholder"]
        assert window.settings_service.settings.language == "en"

        window._save_settings()
        reloaded = SettingsService(StorageService(str(tmp_path))).load_data()
        assert reloaded.language == "en"

    def test_saved_language_is_applied_on_start(self, qapp, bridge, backend, tmp_path):
        settings_service = SettingsService(StorageService(str(tmp_path)))
        settings = settings_service.load_data()
        settings.language = "en"
        settings_service.save_data(settings)

        window = MainWindow(SettingsService(StorageService(str(tmp_path))), backend, bridge)
        try:
            assert window.language_combo.currentData() == "en"
            assert window.save_action.text() == "💾 Save"
        finally:
            window._closing_confirmed = True
            window.close()
            set_language(DEFAULT_LANGUAGE)
