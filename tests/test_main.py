import subprocess
import sys
import os

import pytest

pytest.importorskip("PyQt6")

from main import parse_args  # noqa: E402


def _filter_stderr(stderr_output):
    # Qtが生成する可能性のある無害なメッセージを除外
    return [
        line for line in stderr_output.splitlines()
        if "QApplication" not in line and "qt." not in line.lower() and "This plugin does not support" not in line
    ]


def _run_main(extra_args, settings_dir):
    """
    main.pyを短時間実行し、フィルタ済みの標準エラー出力を返す。
    """
    main_py_path = os.path.join(os.path.dirname(__file__), '..', 'main.py')

    # 環境変数を設定して、ヘッドレス環境でQtを実行できるようにする
    env = os.environ.copy()
    env['QT_QPA_PLATFORM'] = 'offscreen'

    try:
        result = subprocess.run(
            [sys.executable, main_py_path, '--settings-dir', str(settings_dir), *extra_args],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,  # タイムアウト時に例外を発生させない
            env=env
        )
    except subprocess.TimeoutExpired as e:
        # タイムアウトは正常な動作（GUIが起動し、ユーザー入力を待っている状態）
        stderr_output = e.stderr.decode('utf-8', errors='ignore') if isinstance(e.stderr, bytes) else (e.stderr or "")
        return _filter_stderr(stderr_output)
    return _filter_stderr(result.stderr)


def test_run_main_no_errors(tmp_path):
    filtered_stderr = _run_main([], tmp_path / "settings")
    assert not filtered_stderr, f"main.py実行中に予期せぬエラーが発生しました:\n{''.join(filtered_stderr)}"


def test_run_main_with_pdf(tmp_path):
    fitz = pytest.importorskip("fitz")
    pdf_path = tmp_path / "startup.pdf"
    doc = fitz.open()
    doc.new_page().insert_text((72, 72), "startup document")
    doc.save(str(pdf_path))
    doc.close()

    filtered_stderr = _run_main([str(pdf_path)], tmp_path / "settings")
    assert not filtered_stderr, f"PDFを指定した起動でエラーが発生しました:\n{''.join(filtered_stderr)}"


def test_parse_args():
    args = parse_args(["paper.pdf", "-v", "--settings-dir", "/tmp/settings"])
    assert args.file == "paper.pdf"
    assert args.verbose is True
    assert args.debug is False
    assert args.settings_dir == "/tmp/settings"


def test_parse_args_defaults():
    args = parse_args([])
    assert args.file is None
    assert args.log_file is None
