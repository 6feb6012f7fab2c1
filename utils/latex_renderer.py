# utils/latex_renderer.py
"""matplotlibのmathtextを使って注釈の内容をPNG画像にレンダリングします。"""

import io
import logging
import re
from functools import lru_cache
from typing import Optional

from matplotlib import mathtext
from matplotlib.font_manager import FontProperties

logger = logging.getLogger(__name__)

# $$...$$, \[...\], \(...\) は mathtext が解釈できる $...$ に揃える
_DELIMITERS = [
    (re.compile(r"\$\$(.+?)\$\$", re.DOTALL), r"$\1$"),
    (re.compile(r"\\\[(.+?)\\\]", re.DOTALL), r"$\1$"),
    (re.compile(r"\\\((.+?)\\\)", re.DOTALL), r"$\1$"),
]


def normalize_delimiters(content: str) -> str:
    """数式の区切り記号を $...$ に統一する。

    Args:
        content (str): 注釈の内容。

    Returns:
        str: 区切り記号を置き換えた文字列。
    """
    for pattern, replacement in _DELIMITERS:
        content = pattern.sub(replacement, content)
    return content


@lru_cache(maxsize=256)
def render_latex_png(content: str, font_size: float, dpi: float = 72.0) -> Optional[bytes]:
    """注釈の内容をPNG画像にレンダリングする。

    $...$ で囲まれた部分が数式として、それ以外は通常のテキストとして描画されます。

    Args:
        content (str): 注釈の内容。
        font_size (float): フォントサイズ（ポイント）。
        dpi (float): 出力解像度。72で1ポイント=1ピクセル。

    Returns:
        Optional[bytes]: PNG形式の画像データ。内容が空、または数式として解釈できない場合はNone。
    """
    if not content.strip():
        return None

    buffer = io.BytesIO()
    try:
        mathtext.math_to_image(
            normalize_delimiters(content),
            buffer,
            prop=FontProperties(size=font_size),
            dpi=dpi,
            format="png",
        )
    except ValueError as e:
        logger.debug(f"Mathtext could not parse {content!r}: {e}")
        return None
    return buffer.getvalue()
