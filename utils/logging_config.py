# utils/logging_config.py
"""コマンドライン引数に応じてロギングを設定します。"""
import logging
import sys
from typing import List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_level(verbose: bool = False, debug: bool = False) -> int:
    """フラグからログレベルを決定する。既定はWARNING。"""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False, log_file: Optional[str] = None) -> None:
    """ルートロガーを設定する。

    Args:
        verbose (bool): Trueの場合INFO以上を出力する。
        debug (bool): Trueの場合DEBUG以上を出力する（verboseより優先）。
        log_file (Optional[str]): 指定された場合は標準出力ではなくこのファイルに書き出す。
    """
    handlers: List[logging.Handler] = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    else:
        handlers.append(logging.StreamHandler(sys.stdout))

    logging.basicConfig(
        level=resolve_level(verbose, debug),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
