from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, Optional, Set

from PyQt6.QtCore import QObject, QTimer, pyqtBoundSignal, pyqtSlot

from ui.workers import BlockingCallThread

logger = logging.getLogger(__name__)


class AsyncBridge(QObject):
    """
    Qtのイベントループ上でasyncioのコルーチンを実行するためのブリッジ。

    QTimerで定期的にasyncioのイベントループを1反復ずつ回すことで、
    コルーチンの処理はすべてQtのメインスレッド上で行われます。
    時間のかかる処理はBlockingCallThreadで実行し、その結果シグナルでFutureを完了させます。
    ダイアログはopen()で開いてfinishedシグナルを待つため、表示中も他のタスクは進みます。
    """
    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = 10) -> None:
        """
        AsyncBridgeのコンストラクタ。

        Args:
            parent (Optional[QObject]): 親オブジェクト。
            interval_ms (int): イベントループを回す間隔（ミリ秒）。
        """
        super().__init__(parent)
        self.loop: asyncio.AbstractEventLoop = asyncio.new_event_loop()
        self._tasks: Set[asyncio.Task] = set()
        self._calls: Dict[int, asyncio.Future] = {}
        self._threads: Dict[int, BlockingCallThread] = {}
        self._next_call_id: int = 0
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._pump)
        self._timer.start()

    def run(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """コルーチンをタスクとして登録する。結果は次回以降のタイマーで処理される。"""
        task = self.loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    # --- ワーカースレッド ---

    def run_in_thread(self, func: Callable[..., Any], *args: Any) -> asyncio.Future:
        """
        関数をワーカースレッドで実行し、その結果を受け取るFutureを返す。

        Args:
            func (Callable[..., Any]): 実行する関数。
            *args: 関数に渡す引数。

        Returns:
            asyncio.Future: 関数の戻り値、または送出された例外で完了するFuture。
        """
        self._next_call_id += 1
        call_id = self._next_call_id
        future = self.loop.create_future()
        self._calls[call_id] = future

        thread = BlockingCallThread(call_id, func, args, self)
        thread.result_ready.connect(self._on_thread_result)
        thread.error_occurred.connect(self._on_thread_error)
        thread.finished.connect(thread.deleteLater)
        self._threads[call_id] = thread
        thread.start()
        return future

    @pyqtSlot(int, object)
    def _on_thread_result(self, call_id: int, result: Any) -> None:
        self._threads.pop(call_id, None)
        future = self._calls.pop(call_id, None)
        if future is not None and not future.done():
            future.set_result(result)

    @pyqtSlot(int, object)
    def _on_thread_error(self, call_id: int, error: Exception) -> None:
        self._threads.pop(call_id, None)
        future = self._calls.pop(call_id, None)
        if future is not None and not future.done():
            future.set_exception(error)

    # --- シグナル待ち ---

    def wait_signal(self, signal: pyqtBoundSignal) -> asyncio.Future:
        """
        シグナルが次に発行されるまで待つFutureを返す。

        Returns:
            asyncio.Future: シグナルの引数のタプルで完了するFuture。
        """
        future = self.loop.create_future()

        def resolve(*args: Any) -> None:
            signal.disconnect(resolve)
            if not future.done():
                future.set_result(args)

        signal.connect(resolve)
        return future

    # --- ループの駆動 ---

    def _pump(self) -> None:
        """asyncioのイベントループを1反復だけ実行する。"""
        if self.loop.is_closed() or self.loop.is_running():
            return
        self.loop.call_soon(self.loop.stop)
        self.loop.run_forever()

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled error in background task", exc_info=exc)

    def close(self) -> None:
        """実行中のスレッドの終了を待ち、残っているタスクをキャンセルしてイベントループを閉じる。"""
        self._timer.stop()
        for thread in list(self._threads.values()):
            thread.wait()
        self._threads.clear()
        if self.loop.is_closed() or self.loop.is_running():
            return
        for future in self._calls.values():
            future.cancel()
        self._calls.clear()
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        self.loop.close()
