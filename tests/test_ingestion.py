import threading
import time

import pytest
from pdfminer.pdfdocument import PDFPasswordIncorrect, PDFTextExtractionNotAllowed

from resume_analyzer.errors import (
    ExtractionCancelledError,
    InvalidFormatError,
    LoadFailedError,
    TooLargeError,
)
from resume_analyzer.ingestion import (
    LoaderConfig,
    PDFDocumentLoader,
    is_encryption_error,
    is_pdf_bytes,
)

PDF_BYTES = b"%PDF-1.4\n% fake body\n"


class _FakePdf:
    def __init__(self, pages=2, metadata=None):
        self.pages = [object() for _ in range(pages)]
        self.metadata = metadata or {}
        self.closed = False

    def close(self):
        self.closed = True


class _FlakyOpener:
    def __init__(self, failures, error=None, pages=2):
        self.failures = failures
        self.error = error or RuntimeError("worker not ready")
        self.pages = pages
        self.calls = 0

    def __call__(self, stream, password=""):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return _FakePdf(self.pages)


def _make_loader(opener, sleeps=None, **config):
    sleeps = sleeps if sleeps is not None else []
    return PDFDocumentLoader(LoaderConfig(**config), opener=opener, sleep=sleeps.append)


def test_signature_check():
    assert is_pdf_bytes(PDF_BYTES)
    assert not is_pdf_bytes(b"PK\x03\x04 docx")
    assert not is_pdf_bytes(b"")


def test_non_pdf_input_fails_fast():
    opener = _FlakyOpener(failures=0)

    with pytest.raises(InvalidFormatError) as excinfo:
        _make_loader(opener).load(b"Hello, I am plain text")
    assert excinfo.value.kind == "InvalidFormat"
    assert excinfo.value.is_input_error
    assert opener.calls == 0


def test_empty_input_is_invalid_format():
    with pytest.raises(InvalidFormatError):
        _make_loader(_FlakyOpener(failures=0)).load(b"")


def test_oversized_input_fails_before_parsing():
    opener = _FlakyOpener(failures=0)
    loader = _make_loader(opener, max_bytes=16)

    with pytest.raises(TooLargeError) as excinfo:
        loader.load(PDF_BYTES + b"x" * 32)
    assert excinfo.value.limit == 16
    assert opener.calls == 0


def test_default_size_limit_is_ten_mebibytes():
    assert LoaderConfig().max_bytes == 10 * 1024 * 1024
    assert LoaderConfig().max_attempts == 3
    assert LoaderConfig().retry_delay == 1.0


def test_transient_failures_are_retried():
    opener = _FlakyOpener(failures=2, pages=4)
    sleeps = []

    document = _make_loader(opener, sleeps).load(PDF_BYTES)

    assert document.page_count == 4
    assert opener.calls == 3
    assert sleeps == [1.0, 1.0]


def test_exhausted_retries_carry_last_cause():
    last = RuntimeError("still broken")
    opener = _FlakyOpener(failures=10, error=last)
    sleeps = []

    with pytest.raises(LoadFailedError) as excinfo:
        _make_loader(opener, sleeps, retry_delay=0.25).load(PDF_BYTES)

    assert excinfo.value.cause is last
    assert excinfo.value.attempts == 3
    assert excinfo.value.reason == "corrupt"
    assert opener.calls == 3
    assert sleeps == [0.25, 0.25]


def test_password_failure_is_not_retried():
    opener = _FlakyOpener(failures=10, error=PDFPasswordIncorrect())

    with pytest.raises(LoadFailedError) as excinfo:
        _make_loader(opener).load(PDF_BYTES)

    assert excinfo.value.encrypted
    assert opener.calls == 1


def test_wrapped_encryption_errors_are_recognised():
    try:
        try:
            raise PDFPasswordIncorrect()
        except PDFPasswordIncorrect as inner:
            raise RuntimeError("open failed") from inner
    except RuntimeError as outer:
        assert is_encryption_error(outer)

    assert is_encryption_error(RuntimeError(PDFPasswordIncorrect()))
    assert is_encryption_error(PDFTextExtractionNotAllowed())
    assert not is_encryption_error(ValueError("unexpected EOF"))


def test_messages_mentioning_encryption_are_not_enough():
    assert not is_encryption_error(ValueError("syntax error near /Encrypt dictionary"))
    assert not is_encryption_error(RuntimeError("bad password field in form"))

    opener = _FlakyOpener(failures=10, error=ValueError("syntax error near /Encrypt"))
    with pytest.raises(LoadFailedError) as excinfo:
        _make_loader(opener).load(PDF_BYTES)
    assert excinfo.value.reason == "corrupt"
    assert opener.calls == 3


def test_cancellation_between_attempts():
    cancel = threading.Event()

    def opener(stream, password=""):
        cancel.set()
        raise RuntimeError("boom")

    with pytest.raises(ExtractionCancelledError):
        _make_loader(opener).load(PDF_BYTES, cancel_event=cancel)


def test_get_page_is_one_based():
    document = _make_loader(_FlakyOpener(failures=0, pages=2)).load(PDF_BYTES)

    assert document.get_page(1).number == 1
    with pytest.raises(IndexError):
        document.get_page(0)
    with pytest.raises(IndexError):
        document.get_page(3)


def test_real_pdf_yields_positioned_items(make_pdf):
    data = make_pdf(
        [
            [(72, 700, "Jane Smith"), (72, 680, "Engineer")],
            [(72, 700, "Second page")],
        ]
    )

    with PDFDocumentLoader().load(data) as document:
        assert document.page_count == 2
        assert not document.is_encrypted
        items = document.get_page(1).text_items()

    texts = [item["text"] for item in items]
    assert texts == ["Jane", "Smith", "Engineer"]
    jane, smith, engineer = items
    assert jane["x"] < smith["x"]
    assert jane["y"] == pytest.approx(smith["y"])
    assert jane["y"] > engineer["y"]
    assert jane["width"] > 0


def test_load_file_reads_from_disk(make_pdf, tmp_path):
    path = tmp_path / "resume.pdf"
    path.write_bytes(make_pdf([[(72, 700, "Only page")]]))

    with PDFDocumentLoader().load_file(str(path)) as document:
        assert document.page_count == 1


def test_retry_wait_ends_as_soon_as_cancelled():
    cancel = threading.Event()
    sleeps = []

    def opener(stream, password=""):
        threading.Timer(0.05, cancel.set).start()
        raise RuntimeError("worker not ready")

    loader = _make_loader(opener, sleeps, retry_delay=30.0)
    started = time.monotonic()

    with pytest.raises(ExtractionCancelledError):
        loader.load(PDF_BYTES, cancel_event=cancel)

    assert time.monotonic() - started < 5
    assert sleeps == []


def test_metadata_reports_pages_and_info():
    info = {"Title": "Resume", "Author": b"Jane", "Keywords": ["cv", 2]}

    def opener(stream, password=""):
        return _FakePdf(pages=3, metadata=info)

    document = _make_loader(opener).load(PDF_BYTES)

    assert document.metadata == {
        "page_count": 3,
        "info": {"Title": "Resume", "Author": "Jane", "Keywords": ["cv", 2]},
    }


def test_read_metadata_from_real_pdf(make_pdf):
    data = make_pdf([[(72, 700, "One")], [(72, 700, "Two")]], info={"Title": "Jane Smith CV"})

    metadata = PDFDocumentLoader().read_metadata(data)

    assert metadata["page_count"] == 2
    assert metadata["info"]["Title"] == "Jane Smith CV"


def test_searchable_checks_only_the_first_pages(make_pdf):
    loader = PDFDocumentLoader()

    with loader.load(make_pdf([[], [(72, 700, "Text")]])) as document:
        assert document.is_searchable()

    late_text = make_pdf([[], [], [], [(72, 700, "Late")]])
    with loader.load(late_text) as document:
        assert not document.is_searchable()
        assert document.is_searchable(pages_to_check=4)
