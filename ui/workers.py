# ui/workers.py
"""PyMuPDFの呼び出しなど時間のかかる処理をバックグラウンドで実行するためのスレッド機能を提供します。"""

from typing import Any, Callable, Optional, Tuple

from PyQt6.QtCore import QThread, pyqtSignal, QObject


class BlockingCallThread(QThread):
    """渡された関数を1回だけ実行するワーカースレッド。

    PDFの読み込みやレンダリングの間もUIが固まらないよう、関数をバックグラウンドで実行します。

    Signals:
        result_ready (pyqtSignal):
            関数が正常に終了した際に、呼び出しIDと戻り値を送信します。
        error_occurred (pyqtSignal):
            関数が例外を送出した際に、呼び出しIDと例外オブジェクトを送信します。
    """
    result_ready = pyqtSignal(int, object)
    error_occurred = pyqtSignal(int, object)

    def __init__(
        self,
        call_id: int,
        func: Callable[..., Any],
        args: Tuple[Any, ...] = (),
        parent: Optional[QObject] = None,
    ) -> None:
        """BlockingCallThreadのコンストラクタ。

        Args:
            call_id (int): 結果を呼び出し元と対応付けるためのID。
            func (Callable[..., Any]): バックグラウンドで実行する関数。
            args (Tuple[Any, ...]): 関数に渡す引数。
            parent (Optional[QObject]): 親オブジェクト。デフォルトはNone。
        """
        super().__init__(parent)
        self.call_id = call_id
        self.func = func
        self.args = args

    def run(self) -> None:
        """スレッドのメイン処理。関数を実行し、結果または例外をシグナルで通知する。"""
        try:
            result = self.func(*self.args)
        except Exception as e:
            self.error_occurred.emit(self.call_id, e)
            return
        self.result_ready.emit(self.call_id, result)
