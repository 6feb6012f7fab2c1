# services/errors.py
"""サービス層で送出される例外クラス。"""


class AnnotatorError(Exception):
    """このアプリケーションの例外の基底クラス。"""


class DocumentLoadError(AnnotatorError):
    """PDFファイルを開けなかった、またはページ数を取得できなかった場合。"""


class SaveError(AnnotatorError):
    """注釈付きPDFの保存に失敗した場合。"""


class InvalidPageError(AnnotatorError, ValueError):
    """ページ番号が文書の範囲外の場合。"""
