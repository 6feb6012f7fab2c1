# utils/i18n.py
"""表示言語の切り替えと、現在の言語でのUI文字列の取得を提供します。"""

import logging

from utils.constants import DEFAULT_LANGUAGE, DIALOG_TEXTS, LANGUAGES, UI_TEXTS

logger = logging.getLogger(__name__)

_language: str = DEFAULT_LANGUAGE


def set_language(code: str) -> str:
    """表示言語を切り替える。

    Args:
        code (str): 言語コード（"ja" または "en"）。未知のコードの場合は既定の言語になる。

    Returns:
        str: 実際に設定された言語コード。
    """
    global _language
    if code not in LANGUAGES:
        logger.warning(f"Unknown language '{code}', using '{DEFAULT_LANGUAGE}'")
        code = DEFAULT_LANGUAGE
    _language = code
    return code


def current_language() -> str:
    return _language


def ui_text(key: str) -> str:
    """現在の言語のUI文字列を返す。"""
    return UI_TEXTS[_language].get(key, UI_TEXTS[DEFAULT_LANGUAGE][key])


def dialog_text(key: str) -> str:
    """現在の言語のダイアログ文字列を返す。"""
    return DIALOG_TEXTS[_language].get(key, DIALOG_TEXTS[DEFAULT_LANGUAGE][key])
