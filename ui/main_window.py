# ui/main_window.py
import logging
import os
from typing import Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QSplitter, QToolBar, QLineEdit, QMessageBox, QScrollArea, QComboBox, QSizePolicy
)
from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence, QShortcut
from PyQt6.QtCore import Qt

from services.document_backend import DocumentBackend
from services.document_session import DocumentSession, NOTICE_ERROR
from services.settings_service import SettingsService
from ui.async_bridge import AsyncBridge
from ui.handlers.annotation_handler import AnnotationHandler
from ui.handlers.pdf_handler import PDFHandler
from ui.handlers.search_handler import SearchHandler
from ui.widgets import BackgroundClickFilter, PDFDisplayLabel, SidebarWidget
from utils.constants import APP_TITLE, FONT_SIZE_STEP, LANGUAGES, SIDEBAR_WIDTH
from utils.i18n import current_language, dialog_text, set_language, ui_text

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    アプリケーションのメインウィンドウ。

    ツールバー・サイドバー・ページ表示領域を組み立て、ユーザー操作を各ハンドラに振り分けます。
    文書の状態はDocumentSessionが持ち、非同期の処理はAsyncBridgeを通してQtのイベントループ上で実行されます。
    """
    def __init__(self, settings_service: SettingsService, backend: DocumentBackend, bridge: AsyncBridge) -> None:
        """
        MainWindowのコンストラクタ。

        Args:
            settings_service (SettingsService): ユーザー設定の読み書きを行うサービス。
            backend (DocumentBackend): 文書バックエンド。
            bridge (AsyncBridge): コルーチンとワーカースレッドを実行するブリッジ。
        """
        super().__init__()
        self.settings_service = settings_service
        settings = self.settings_service.load_data()
        self.setWindowTitle(APP_TITLE)
        self.resize(*settings.window_size)
        self._closing_confirmed = False
        set_language(settings.language)

        self.bridge = bridge
        self.session = DocumentSession(backend, confirm=self._confirm, notify=self._notify)

        self.pdf_handler = PDFHandler(self)
        self.annotation_handler = AnnotationHandler(self)
        self.search_handler = SearchHandler(self)

        self.setup_toolbar()
        self.setup_central_area()
        self.connect_signals()
        self.setup_shortcuts()

        self.pdf_handler.zoom_factor = settings.zoom
        self.zoom_label.setText(f"{round(settings.zoom * 100)}%")
        self.update_window_state()

    def createPopupMenu(self):
        return None

    # --- レイアウト ---

    def setup_toolbar(self) -> None:
        toolbar = QToolBar("メインツールバー")
        toolbar.setMovable(False)
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, toolbar)
        toolbar.setStyleSheet("""
            QToolBar { spacing: 4px; }
            QPushButton, QToolButton {
                background-color: #f0f0f0;
                border: 1px solid #c0c0c0;
                padding: 5px 10px;
                border-radius: 4px;
            }
            QPushButton:disabled, QToolButton:disabled { color: #999; }
        """)

        self.open_action = QAction(ui_text("open"), self)
        self.save_action = QAction(ui_text("save"), self)
        self.save_as_action = QAction(ui_text("save_as"), self)
        self.zoom_out_action = QAction(ui_text("zoom_out"), self)
        self.zoom_in_action = QAction(ui_text("zoom_in"), self)
        self.open_external_action = QAction(ui_text("open_external"), self)

        toolbar.addAction(self.open_action)
        toolbar.addAction(self.save_action)
        toolbar.addAction(self.save_as_action)
        toolbar.addSeparator()
        toolbar.addAction(self.zoom_out_action)
        self.zoom_label = QLabel("100%")
        self.zoom_label.setMinimumWidth(48)
        self.zoom_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        toolbar.addWidget(self.zoom_label)
        toolbar.addAction(self.zoom_in_action)
        toolbar.addSeparator()
        toolbar.addAction(self.open_external_action)
        toolbar.addSeparator()
        self.file_label = QLabel(ui_text("no_file"))
        toolbar.addWidget(self.file_label)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        toolbar.addWidget(spacer)
        self.language_combo = QComboBox()
        for code, label in LANGUAGES.items():
            self.language_combo.addItem(label, code)
        self.language_combo.setCurrentIndex(self.language_combo.findData(current_language()))
        self.language_combo.setToolTip(ui_text("language"))
        toolbar.addWidget(self.language_combo)

    def setup_central_area(self) -> None:
        """サイドバーとページ表示領域を配置する。"""
        self.sidebar = SidebarWidget(self)

        viewer = QWidget()
        viewer_layout = QVBoxLayout(viewer)
        viewer_layout.setContentsMargins(0, 0, 0, 0)

        nav = QHBoxLayout()
        self.prev_page_button = QPushButton(ui_text("prev_page"))
        self.next_page_button = QPushButton(ui_text("next_page"))
        self.page_num_input = QLineEdit()
        self.page_num_input.setFixedWidth(50)
        self.page_num_input.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.page_label = QLabel("/ 0")
        nav.addStretch()
        nav.addWidget(self.prev_page_button)
        nav.addWidget(self.page_num_input)
        nav.addWidget(self.page_label)
        nav.addWidget(self.next_page_button)
        nav.addStretch()
        viewer_layout.addLayout(nav)

        self.pdf_display_label = PDFDisplayLabel(self)
        self.pdf_display_label.setText(ui_text("no_file"))
        self.pdf_scroll_area = QScrollArea()
        self.pdf_scroll_area.setWidget(self.pdf_display_label)
        self.pdf_scroll_area.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop)
        self.pdf_scroll_area.setStyleSheet("QScrollArea { background-color: #e0e0e0; }")
        viewer_layout.addWidget(self.pdf_scroll_area)
        # ページ画像の外側（灰色の余白）のクリックでも選択を解除する
        self.background_click_filter = BackgroundClickFilter(self)
        self.pdf_scroll_area.viewport().installEventFilter(self.background_click_filter)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.sidebar)
        splitter.addWidget(viewer)
        splitter.setStretchFactor(1, 1)
        splitter.setSizes([SIDEBAR_WIDTH, max(1, self.width() - SIDEBAR_WIDTH)])
        self.setCentralWidget(splitter)

    def connect_signals(self) -> None:
        self.open_action.triggered.connect(self.pdf_handler.open_pdf_file)
        self.save_action.triggered.connect(self.pdf_handler.save)
        self.save_as_action.triggered.connect(self.pdf_handler.save_as)
        self.zoom_in_action.triggered.connect(self.pdf_handler.zoom_in)
        self.zoom_out_action.triggered.connect(self.pdf_handler.zoom_out)
        self.open_external_action.triggered.connect(self.pdf_handler.open_external)

        self.prev_page_button.clicked.connect(self.pdf_handler.show_prev_page)
        self.next_page_button.clicked.connect(self.pdf_handler.show_next_page)
        self.page_num_input.returnPressed.connect(self.pdf_handler.goto_page_from_input)

        self.sidebar.page_requested.connect(self.pdf_handler.goto_page)
        self.sidebar.query_changed.connect(self.search_handler.on_query_changed)
        self.language_combo.currentIndexChanged.connect(self.on_language_changed)

    def setup_shortcuts(self) -> None:
        shortcuts = [
            (QKeySequence.StandardKey.Open, self.pdf_handler.open_pdf_file),
            (QKeySequence.StandardKey.Save, self.pdf_handler.save),
            (QKeySequence("Ctrl+Shift+S"), self.pdf_handler.save_as),
            (QKeySequence("Ctrl+P"), self.pdf_handler.open_external),
            (QKeySequence("Ctrl+="), self.enlarge),
            (QKeySequence("Ctrl++"), self.enlarge),
            (QKeySequence("Ctrl+;"), self.enlarge),
            (QKeySequence("Ctrl+-"), self.shrink),
            (QKeySequence(Qt.Key.Key_Delete), self.annotation_handler.delete_selected),
            (QKeySequence(Qt.Key.Key_Backspace), self.annotation_handler.delete_selected),
        ]
        self._shortcuts = []
        for sequence, slot in shortcuts:
            shortcut = QShortcut(sequence, self)
            shortcut.activated.connect(slot)
            self._shortcuts.append(shortcut)

    # --- 操作 ---

    def enlarge(self) -> None:
        """選択中の注釈があれば文字を大きくし、なければページを拡大する。"""
        if not self.annotation_handler.adjust_font(FONT_SIZE_STEP):
            self.pdf_handler.zoom_in()

    def shrink(self) -> None:
        """選択中の注釈があれば文字を小さくし、なければページを縮小する。"""
        if not self.annotation_handler.adjust_font(-FONT_SIZE_STEP):
            self.pdf_handler.zoom_out()

    def on_language_changed(self, index: int) -> None:
        """表示言語を切り替え、設定に保存して画面の文言を更新する。"""
        code = self.language_combo.itemData(index)
        self.settings_service.settings.language = set_language(code)
        self.retranslate_ui()

    def retranslate_ui(self) -> None:
        """現在の表示言語で、ツールバー・ナビゲーション・サイドバー・注釈の文言を設定し直す。"""
        labelled = [
            (self.open_action, "open"),
            (self.save_action, "save"),
            (self.save_as_action, "save_as"),
            (self.zoom_out_action, "zoom_out"),
            (self.zoom_in_action, "zoom_in"),
            (self.open_external_action, "open_external"),
            (self.prev_page_button, "prev_page"),
            (self.next_page_button, "next_page"),
        ]
        for widget, key in labelled:
            widget.setText(ui_text(key))
        self.language_combo.setToolTip(ui_text("language"))
        pixmap = self.pdf_display_label.pixmap()
        if pixmap is None or pixmap.isNull():
            self.pdf_display_label.setText(ui_text("no_file"))
        self.sidebar.retranslate_ui()
        self.annotation_handler.retranslate_ui()
        self.update_window_state()

    def start(self) -> None:
        """起動引数で指定されたファイルがあれば読み込みを開始する。"""
        self.bridge.run(self.pdf_handler.open_startup_file())

    def update_window_state(self) -> None:
        """ウィンドウタイトル・ファイル名表示・ボタンの有効状態を更新する。"""
        path: Optional[str] = self.session.path
        ready = self.session.is_ready
        if self.session.is_loading:
            self.file_label.setText(ui_text("loading"))
        elif path:
            name = os.path.basename(path)
            marker = " *" if self.session.is_dirty else ""
            self.file_label.setText(f"{name}{marker}")
            self.setWindowTitle(f"{name}{marker}")
        else:
            self.file_label.setText(ui_text("no_file"))
            self.setWindowTitle(APP_TITLE)

        for action in (self.save_action, self.save_as_action, self.open_external_action):
            action.setEnabled(ready)
        self.prev_page_button.setEnabled(ready and self.pdf_handler.current_page > 0)
        self.next_page_button.setEnabled(ready and self.pdf_handler.current_page < self.session.num_pages - 1)

    # --- セッションからのコールバック ---

    async def _confirm(self, message: str) -> bool:
        """
        はい/いいえの確認ダイアログを表示し、閉じられるまで待つ。

        ダイアログはopen()でウィンドウモーダルに開くため、待っている間も他のタスクは進みます。
        """
        box = QMessageBox(
            QMessageBox.Icon.Warning, dialog_text("warning"), message,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No, self,
        )
        box.setDefaultButton(QMessageBox.StandardButton.No)
        box.open()
        await self.bridge.wait_signal(box.finished)
        clicked = box.clickedButton()
        accepted = clicked is not None and box.standardButton(clicked) == QMessageBox.StandardButton.Yes
        box.deleteLater()
        return accepted

    def _notify(self, level: str, message: str) -> None:
        """お知らせを表示する。結果を待たないので呼び出し元の処理は止まらない。"""
        if level == NOTICE_ERROR:
            box = QMessageBox(QMessageBox.Icon.Critical, ui_text("error"), message,
                              QMessageBox.StandardButton.Ok, self)
        else:
            box = QMessageBox(QMessageBox.Icon.Information, APP_TITLE, message,
                              QMessageBox.StandardButton.Ok, self)
        box.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
        box.open()

    # --- 終了処理 ---

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._closing_confirmed:
            self._save_settings()
            event.accept()
            return
        event.ignore()
        self.bridge.run(self._confirm_close())

    async def _confirm_close(self) -> None:
        if await self.session.request_close():
            self._closing_confirmed = True
            self.close()

    def _save_settings(self) -> None:
        settings = self.settings_service.settings
        settings.zoom = self.pdf_handler.zoom_factor
        settings.window_size = [self.width(), self.height()]
        self.settings_service.save_data(settings)
