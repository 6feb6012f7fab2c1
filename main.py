"""
アプリケーションのエントリーポイント。

このスクリプトは、コマンドライン引数とロギングを設定してPyQt6アプリケーションを初期化し、
メインウィンドウであるMainWindowを生成・表示して、アプリケーションのイベントループを開始します。
また、プロジェクトのルートディレクトリをPythonのパスに追加し、
他のモジュール（ui, servicesなど）を正しくインポートできるように設定します。
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

# このファイル(main.py)があるディレクトリをモジュール検索パスに追加します。
current_dir: str = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from PyQt6.QtWidgets import QApplication

from services.pdf_backend import PyMuPDFBackend
from services.settings_service import SettingsService
from services.storage_service import StorageService
from ui.async_bridge import AsyncBridge
from ui.main_window import MainWindow
from utils.constants import APP_TITLE, APP_VERSION, SETTINGS_DIR_NAME
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """コマンドライン引数を解析する。"""
    parser = argparse.ArgumentParser(
        description=f"{APP_TITLE}: PDFにLaTeXの注釈を書き込むビューア",
    )
    parser.add_argument("file", nargs="?", default=None, help="起動時に開くPDFファイル")
    parser.add_argument("-v", "--verbose", action="store_true", help="INFOレベルのログを出力する")
    parser.add_argument("-D", "--debug", action="store_true", help="DEBUGレベルのログを出力する")
    parser.add_argument("-l", "--log-file", default=None, help="ログの出力先ファイル")
    parser.add_argument(
        "--settings-dir",
        default=os.path.join(os.path.expanduser("~"), SETTINGS_DIR_NAME),
        help="設定ファイルを保存するディレクトリ",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug, log_file=args.log_file)
    logger.info(f"Starting {APP_TITLE} {APP_VERSION}")

    # 1. PyQtアプリケーションインスタンスを作成します。
    app: QApplication = QApplication(sys.argv[:1])
    app.setApplicationName(APP_TITLE)

    # 2. 非同期処理のブリッジ、設定、バックエンドを用意してメインウィンドウを作成します。
    #    PyMuPDFの呼び出しはブリッジのワーカースレッドで実行されます。
    bridge = AsyncBridge(app)
    settings_service = SettingsService(StorageService(args.settings_dir))
    backend = PyMuPDFBackend(startup_file=args.file, run_blocking=bridge.run_in_thread)
    window: MainWindow = MainWindow(settings_service, backend, bridge)

    # 3. ウィンドウを表示し、起動引数のファイルがあれば読み込みます。
    window.show()
    window.start()

    # 4. イベントループを開始し、終了後に非同期処理を片付けます。
    exit_code = app.exec()
    bridge.close()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
