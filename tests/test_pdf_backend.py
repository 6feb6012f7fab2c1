import asyncio

import fitz  # PyMuPDF
import pytest

from services.errors import DocumentLoadError, SaveError
from services.pdf_backend import PyMuPDFBackend
from utils.pdf_utils import PDFUtils


def make_pdf(path, texts):
    doc = fitz.open()
    for text in texts:
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return str(path)


@pytest.fixture
def pdf_path(tmp_path):
    return make_pdf(tmp_path / "sample.pdf", ["first page", "second theorem page", "third"])


@pytest.fixture
def pdf_backend():
    return PyMuPDFBackend()


RECORDS = [
    {"page": 1, "x": 100.0, "y": 200.0, "content": r"$\alpha + \beta$"},
    {"page": 3, "x": 50.0, "y": 400.0, "content": "plain text", "fontSize": 14.0},
]


class TestOpen:
    def test_page_count(self, pdf_backend, pdf_path):
        assert asyncio.run(pdf_backend.open_document(pdf_path)) == 3

    def test_missing_file(self, pdf_backend, tmp_path):
        with pytest.raises(DocumentLoadError):
            asyncio.run(pdf_backend.open_document(str(tmp_path / "missing.pdf")))

    def test_not_a_pdf(self, pdf_backend, tmp_path):
        bogus = tmp_path / "notes.txt"
        bogus.write_text("not a pdf at all")
        with pytest.raises(DocumentLoadError):
            asyncio.run(pdf_backend.open_document(str(bogus)))

    def test_fresh_document_has_no_annotations(self, pdf_backend, pdf_path):
        assert asyncio.run(pdf_backend.load_annotations(pdf_path)) == []


class TestAnnotationPersistence:
    def test_save_and_reload(self, pdf_backend, pdf_path):
        asyncio.run(pdf_backend.save_document_with_annotations(pdf_path, RECORDS))
        loaded = asyncio.run(pdf_backend.load_annotations(pdf_path))
        assert [r["page"] for r in loaded] == [1, 3]
        assert [r["content"] for r in loaded] == [r"$\alpha + \beta$", "plain text"]
        assert loaded[0]["x"] == pytest.approx(100.0, abs=0.5)
        assert loaded[0]["y"] == pytest.approx(200.0, abs=0.5)
        assert loaded[1]["fontSize"] == pytest.approx(14.0)

    def test_repeated_saves_do_not_duplicate(self, pdf_backend, pdf_path):
        for _ in range(3):
            asyncio.run(pdf_backend.save_document_with_annotations(pdf_path, RECORDS))
        assert len(asyncio.run(pdf_backend.load_annotations(pdf_path))) == 2

    def test_saving_fewer_records_removes_deleted(self, pdf_backend, pdf_path):
        asyncio.run(pdf_backend.save_document_with_annotations(pdf_path, RECORDS))
        asyncio.run(pdf_backend.save_document_with_annotations(pdf_path, RECORDS[1:]))
        loaded = asyncio.run(pdf_backend.load_annotations(pdf_path))
        assert [r["content"] for r in loaded] == ["plain text"]

    def test_save_as_leaves_source_untouched(self, pdf_backend, pdf_path, tmp_path):
        target = str(tmp_path / "copy.pdf")
        asyncio.run(pdf_backend.save_document_with_annotations(target, RECORDS, source_path=pdf_path))
        assert asyncio.run(pdf_backend.open_document(target)) == 3
        assert len(asyncio.run(pdf_backend.load_annotations(target))) == 2
        assert asyncio.run(pdf_backend.load_annotations(pdf_path)) == []

    def test_invalid_page_record_is_skipped(self, pdf_backend, pdf_path):
        records = [{"page": 9, "x": 0.0, "y": 0.0, "content": "lost"}] + RECORDS[:1]
        asyncio.run(pdf_backend.save_document_with_annotations(pdf_path, records))
        assert len(asyncio.run(pdf_backend.load_annotations(pdf_path))) == 1

    def test_save_to_unreadable_source_raises(self, pdf_backend, tmp_path):
        with pytest.raises(SaveError):
            asyncio.run(pdf_backend.save_document_with_annotations(
                str(tmp_path / "out.pdf"), RECORDS, source_path=str(tmp_path / "missing.pdf")))


class TestPageContent:
    def test_page_text(self, pdf_backend, pdf_path):
        assert "theorem" in asyncio.run(pdf_backend.get_page_text(pdf_path, 1))

    def test_render_page_png(self, pdf_backend, pdf_path):
        png = asyncio.run(pdf_backend.render_page(pdf_path, 0, 0.5))
        assert png.startswith(b"\x89PNG")

    def test_render_scale_changes_size(self, pdf_backend, pdf_path):
        small = asyncio.run(pdf_backend.render_page(pdf_path, 0, 0.4))
        large = asyncio.run(pdf_backend.render_page(pdf_path, 0, 1.6))
        assert len(large) > len(small)


class TestStartupFile:
    def test_existing_file(self, pdf_path):
        assert asyncio.run(PyMuPDFBackend(startup_file=pdf_path).get_startup_file()) == pdf_path

    def test_missing_file(self, tmp_path):
        backend = PyMuPDFBackend(startup_file=str(tmp_path / "gone.pdf"))
        assert asyncio.run(backend.get_startup_file()) is None

    def test_no_file(self):
        assert asyncio.run(PyMuPDFBackend().get_startup_file()) is None


@pytest.mark.parametrize("da,expected", [
    ("0 0 0 rg /Helv 20 Tf", 20.0),
    ("/Helv 11.5 Tf 0 g", 11.5),
    ("0 g", None),
    ("", None),
    (None, None),
    ("/Helv 0 Tf", None),
])
def test_parse_font_size(da, expected):
    assert PDFUtils.parse_font_size(da) == expected


def test_freetext_rect_is_centred_on_y():
    rect = PDFUtils.freetext_rect(10.0, 100.0, 20.0)
    assert (rect.x0, rect.y0, rect.y1) == (10.0, 85.0, 115.0)
    assert rect.width == 200.0


def test_blocking_calls_go_through_runner(pdf_path):
    calls = []

    async def recording_runner(func, *args):
        calls.append(func.__name__)
        return func(*args)

    backend = PyMuPDFBackend(run_blocking=recording_runner)

    async def scenario():
        await backend.open_document(pdf_path)
        await backend.load_annotations(pdf_path)
        await backend.get_page_text(pdf_path, 0)
        await backend.render_page(pdf_path, 0, 0.5)
        await backend.save_document_with_annotations(pdf_path, RECORDS)

    asyncio.run(scenario())
    assert calls == ["_open_sync", "_load_annotations_sync", "_page_text_sync", "render_page_sync", "_save_sync"]
