from __future__ import annotations
import logging
import os
from typing import TYPE_CHECKING, Optional

from PyQt6.QtWidgets import QDialog, QFileDialog, QMessageBox
from PyQt6.QtGui import QDesktopServices, QPixmap
from PyQt6.QtCore import QUrl

from utils.constants import PDF_FILE_FILTER, THUMBNAIL_SCALE
from utils.coordinates import clamp_zoom, zoom_in, zoom_out
from utils.i18n import dialog_text, ui_text

if TYPE_CHECKING:
    from ..main_window import MainWindow

logger = logging.getLogger(__name__)


class PDFHandler:
    """
    PDF文書の読み込み・保存、ページ表示、ナビゲーション、ズームを担うハンドラクラス。

    文書の状態そのものはDocumentSessionが管理し、このクラスはダイアログの表示と
    ページ画像の描画、ウィンドウ表示の更新を受け持ちます。
    """
    def __init__(self, main_window: MainWindow) -> None:
        """
        PDFHandlerのコンストラクタ。

        Args:
            main_window (MainWindow): 親となるメインウィンドウインスタンス。
        """
        self.main: MainWindow = main_window
        self.current_page: int = 0  # 0始まり
        self.zoom_factor: float = 1.0
        self._render_generation: int = 0
        self._thumbnail_generation: int = 0

    @property
    def session(self):
        return self.main.session

    # --- 読み込み ---

    def open_pdf_file(self) -> None:
        """ファイルダイアログを開き、選択されたPDFを読み込む。"""
        self.main.bridge.run(self._choose_and_open())

    async def _choose_and_open(self) -> None:
        start_dir = self.main.settings_service.settings.last_directory
        dialog = QFileDialog(self.main, ui_text("open"), start_dir, PDF_FILE_FILTER)
        dialog.setFileMode(QFileDialog.FileMode.ExistingFile)
        file_path = await self._run_file_dialog(dialog)
        if file_path:
            await self._open(file_path)

    async def _run_file_dialog(self, dialog: QFileDialog) -> Optional[str]:
        """
        ファイルダイアログを開いて閉じられるまで待ち、選択されたパスを返す。

        open()で開くため、ダイアログの表示中も描画などの他のタスクは止まりません。

        Returns:
            Optional[str]: 選択されたファイルのパス。キャンセルされた場合はNone。
        """
        dialog.open()
        (result,) = await self.main.bridge.wait_signal(dialog.finished)
        files = dialog.selectedFiles()
        dialog.deleteLater()
        if result != QDialog.DialogCode.Accepted.value or not files:
            return None
        return files[0]

    async def open_startup_file(self) -> None:
        """コマンドライン引数で指定されたファイルがあれば開く。"""
        opened = await self.session.open_startup_file()
        self._after_open(opened)

    async def _open(self, path: str) -> None:
        self.main.file_label.setText(ui_text("loading"))
        opened = await self.session.open(path)
        self._after_open(opened)

    def _after_open(self, opened: bool) -> None:
        """読み込みの結果に応じて表示を初期化、または元の文書の表示を維持する。"""
        if opened:
            path = self.session.path
            self.current_page = 0
            self.main.settings_service.settings.last_directory = os.path.dirname(os.path.abspath(path))
            self.main.annotation_handler.reset()
            self.main.search_handler.reset()
            self.main.sidebar.reset_thumbnails(self.session.num_pages)
            self.show_page(0)
            self.main.bridge.run(self._load_thumbnails())
        elif self.session.is_ready:
            # 読み込みがキャンセル・失敗した場合は元の文書の表示を維持する
            self.show_page(self.current_page)
        self.main.update_window_state()

    # --- 保存 ---

    def save(self) -> None:
        """現在のファイルに上書き保存する。"""
        if not self.session.is_ready:
            return
        self.main.bridge.run(self._save())

    async def _save(self) -> None:
        await self.session.save()
        self.main.update_window_state()

    def save_as(self) -> None:
        """保存先を選んで注釈付きPDFを保存する。"""
        if not self.session.is_ready:
            return
        self.main.bridge.run(self._save_as())

    async def _save_as(self) -> None:
        saved = await self.session.save_as(self._choose_save_target)
        if saved and self.session.path:
            self.main.settings_service.settings.last_directory = os.path.dirname(self.session.path)
        self.main.update_window_state()

    async def _choose_save_target(self) -> Optional[str]:
        """保存先のファイルダイアログを表示する。キャンセルされた場合はNone。"""
        current = self.session.path or ""
        dialog = QFileDialog(self.main, ui_text("save_as"), current, PDF_FILE_FILTER)
        dialog.setAcceptMode(QFileDialog.AcceptMode.AcceptSave)
        dialog.setDefaultSuffix("pdf")
        return await self._run_file_dialog(dialog)

    def open_external(self) -> None:
        """現在の文書をシステムの既定のビューアで開く。"""
        path = self.session.path
        if not path:
            return
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(path)):
            logger.warning(f"Could not open {path} in system viewer")
            QMessageBox.warning(self.main, dialog_text("warning"), dialog_text("open_external_failed"))

    # --- ページ表示 ---

    def show_page(self, page_number: int) -> None:
        """
        指定されたページ番号（0始まり）のページを表示する。

        ページ画像のレンダリングは非同期で行い、古いレンダリング結果は破棄します。
        """
        if not self.session.is_ready or not (0 <= page_number < self.session.num_pages):
            return
        self.current_page = page_number
        self.main.page_label.setText(f"/ {self.session.num_pages}")
        self.main.page_num_input.setText(str(page_number + 1))
        self.main.annotation_handler.refresh()
        self.main.bridge.run(self._render(page_number))

    async def _render(self, page_number: int) -> None:
        self._render_generation += 1
        generation = self._render_generation
        path = self.session.path
        dpr = self.main.devicePixelRatioF()
        try:
            png = await self.session.backend.render_page(path, page_number, self.zoom_factor * dpr)
        except Exception as e:
            logger.error(f"Failed to render page {page_number + 1} of {path}: {e}")
            self.main.pdf_display_label.setText(ui_text("error"))
            return
        if generation != self._render_generation or path != self.session.path:
            return

        pixmap = QPixmap()
        pixmap.loadFromData(png, "PNG")
        pixmap.setDevicePixelRatio(dpr)
        self.main.pdf_display_label.setPixmap(pixmap)
        self.main.pdf_display_label.adjustSize()
        self.main.annotation_handler.refresh()

    async def _load_thumbnails(self) -> None:
        """サイドバーのサムネイルを1ページずつ非同期にレンダリングする。"""
        self._thumbnail_generation += 1
        generation = self._thumbnail_generation
        path = self.session.path
        for page_index in range(self.session.num_pages):
            try:
                png = await self.session.backend.render_page(path, page_index, THUMBNAIL_SCALE)
            except Exception as e:
                logger.warning(f"Failed to render thumbnail {page_index + 1}: {e}")
                continue
            if generation != self._thumbnail_generation or path != self.session.path:
                return
            pixmap = QPixmap()
            pixmap.loadFromData(png, "PNG")
            self.main.sidebar.set_thumbnail(page_index + 1, pixmap)

    def refresh(self) -> None:
        """現在のページを再描画する。"""
        self.show_page(self.current_page)

    def show_prev_page(self) -> None:
        """前のページを表示する。"""
        self.show_page(self.current_page - 1)

    def show_next_page(self) -> None:
        """次のページを表示する。"""
        self.show_page(self.current_page + 1)

    def goto_page(self, page: int) -> None:
        """1始まりのページ番号でジャンプする。検索結果や注釈一覧から呼ばれる。"""
        self.show_page(page - 1)

    def goto_page_from_input(self) -> None:
        """入力フィールドのページ番号にジャンプする。"""
        try:
            page_num = int(self.main.page_num_input.text()) - 1
        except ValueError:
            self.main.page_num_input.setText(str(self.current_page + 1))
            return
        if 0 <= page_num < self.session.num_pages:
            self.show_page(page_num)
        else:
            self.main.page_num_input.setText(str(self.current_page + 1))

    # --- ズーム ---

    def zoom_in(self) -> None:
        self.set_zoom(zoom_in(self.zoom_factor))

    def zoom_out(self) -> None:
        self.set_zoom(zoom_out(self.zoom_factor))

    def set_zoom(self, zoom: float) -> None:
        """ズーム率を変更し、ページと注釈を再配置する。"""
        zoom = clamp_zoom(zoom)
        if abs(zoom - self.zoom_factor) < 1e-9:
            return
        self.zoom_factor = zoom
        self.main.settings_service.settings.zoom = zoom
        self.main.zoom_label.setText(f"{round(zoom * 100)}%")
        if self.session.is_ready:
            self.show_page(self.current_page)
