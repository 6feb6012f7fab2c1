# utils/constants.py
"""アプリケーション全体で共有される定数を定義します。"""

APP_TITLE = "PDF LaTeX Annotator"
APP_VERSION = "1.0.0"

# --- 注釈 ---
DEFAULT_FONT_SIZE = 20.0
MIN_FONT_SIZE = 10.0
FONT_SIZE_STEP = 2.0

# --- ズーム ---
MIN_ZOOM = 0.4
ZOOM_STEP = 0.2
DEFAULT_ZOOM = 1.0

# --- ウィンドウ ---
DEFAULT_WINDOW_SIZE = (1200, 850)
SIDEBAR_WIDTH = 300
THUMBNAIL_WIDTH = 120
THUMBNAIL_SCALE = 0.2
SETTINGS_DIR_NAME = ".pdf_latex_annotator"

# --- 検索 ---
SEARCH_CONTEXT_CHARS = 20

# --- PDFへの保存形式 (FreeText注釈) ---
FREETEXT_BOX_WIDTH = 200.0
FREETEXT_LINE_FACTOR = 1.5
FREETEXT_FONT_NAME = "helv"
PDF_FILE_FILTER = "PDF Files (*.pdf)"

# --- 表示言語 ---
LANGUAGES = {
    "ja": "🇯🇵日本語",
    "en": "🇺🇸English",
}
DEFAULT_LANGUAGE = "ja"

# --- UI文字列 ---
UI_TEXT = {
    "open": "📂 開く",
    "save": "💾 保存",
    "save_as": "💾 別名保存",
    "zoom_in": "🔍 拡大",
    "zoom_out": "🔍 縮小",
    "open_external": "🖥 外部ビューアで開く",
    "prev_page": "◀ 前",
    "next_page": "次 ▶",
    "no_file": "ファイル未選択",
    "loading": "読み込み中...",
    "add_annotation": "➕ 注釈を追加",
    "thumbnails_tab": "📄",
    "annotations_tab": "📝 注釈",
    "search_tab": "🔍 検索",
    "search_placeholder": "検索語を入力...",
    "no_annotations": "注釈はありません",
    "empty_annotation": "(空)",
    "search_count": "{count} 件",
    "edit_placeholder": "LaTeX / テキストを入力...",
    "error": "エラー",
    "language": "表示言語",
}

DIALOG_TEXT = {
    "warning": "警告",
    "unsaved_changes_open": "保存されていない変更があります。\n変更を破棄して別のファイルを開きますか？",
    "unsaved_changes_close": "保存されていない変更があります。\n変更を破棄して終了しますか？",
    "load_failed": "PDFファイルを開けませんでした",
    "save_success": "保存しました！",
    "save_failed": "保存に失敗しました",
    "open_external_failed": "外部ビューアで開けませんでした",
    "no_search_results": "一致する箇所はありません",
}

UI_TEXT_EN = {
    "open": "📂 Open",
    "save": "💾 Save",
    "save_as": "💾 Save As",
    "zoom_in": "🔍 Zoom In",
    "zoom_out": "🔍 Zoom Out",
    "open_external": "🖥 Open in Viewer",
    "prev_page": "◀ Prev",
    "next_page": "Next ▶",
    "no_file": "No file selected",
    "loading": "Loading...",
    "add_annotation": "➕ Add Annotation",
    "thumbnails_tab": "📄",
    "annotations_tab": "📝 Annotations",
    "search_tab": "🔍 Search",
    "search_placeholder": "Search...",
    "no_annotations": "No annotations",
    "empty_annotation": "(empty)",
    "search_count": "{count} hits",
    "edit_placeholder": "Type LaTeX / text...",
    "error": "Error",
    "language": "Language",
}

DIALOG_TEXT_EN = {
    "warning": "Warning",
    "unsaved_changes_open": "You have unsaved changes.\nDo you want to discard changes and open another file?",
    "unsaved_changes_close": "You have unsaved changes.\nDo you want to discard changes and exit?",
    "load_failed": "Failed to open the PDF file",
    "save_success": "Saved successfully!",
    "save_failed": "Failed to save",
    "open_external_failed": "Could not open the file in the system viewer",
    "no_search_results": "No matches",
}

UI_TEXTS = {"ja": UI_TEXT, "en": UI_TEXT_EN}
DIALOG_TEXTS = {"ja": DIALOG_TEXT, "en": DIALOG_TEXT_EN}
