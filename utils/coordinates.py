# utils/coordinates.py
"""
画面座標（ピクセル）と文書座標（ズーム1.0での単位）を相互に変換する関数群。

注釈の位置は常に文書座標で保持し、描画時にのみ現在のズーム率で画面座標へ
投影します。配置・ドラッグ・右クリックメニューの位置計算はすべてここを通します。
"""
from typing import Tuple

from utils.constants import MIN_ZOOM, ZOOM_STEP

Point = Tuple[float, float]


def _check_scale(scale: float) -> None:
    if scale <= 0:
        raise ValueError(f"scale must be positive: {scale}")


def document_from_screen(value: float, scale: float) -> float:
    """画面座標の値を文書座標に変換する。

    Args:
        value (float): 画面上のピクセル値。
        scale (float): 現在のズーム率（正の値）。

    Returns:
        float: 文書座標の値。

    Raises:
        ValueError: scaleが0以下の場合。
    """
    _check_scale(scale)
    return value / scale


def screen_from_document(value: float, scale: float) -> float:
    """文書座標の値を画面座標に変換する。

    Args:
        value (float): 文書座標の値。
        scale (float): 現在のズーム率（正の値）。

    Returns:
        float: 画面上のピクセル値。

    Raises:
        ValueError: scaleが0以下の場合。
    """
    _check_scale(scale)
    return value * scale


def document_point_from_screen(point: Point, scale: float) -> Point:
    """画面座標の点 (x, y) を文書座標の点に変換する。"""
    return document_from_screen(point[0], scale), document_from_screen(point[1], scale)


def screen_point_from_document(point: Point, scale: float) -> Point:
    """文書座標の点 (x, y) を画面座標の点に変換する。"""
    return screen_from_document(point[0], scale), screen_from_document(point[1], scale)


# --- ズームのポリシー（上限は設けない） ---

def zoom_in(scale: float) -> float:
    """ズーム率を1段階上げる。小数第1位に丸める。"""
    return round(scale + ZOOM_STEP, 1)


def zoom_out(scale: float) -> float:
    """ズーム率を1段階下げる。MIN_ZOOMより小さくはならない。"""
    return max(MIN_ZOOM, round(scale - ZOOM_STEP, 1))


def clamp_zoom(scale: float) -> float:
    """ズーム率を下限MIN_ZOOMで切り詰める。"""
    return max(MIN_ZOOM, scale)
