import base64
import json
import os
import sys

# Offscreen platform for Qt
os.environ["QT_QPA_PLATFORM"] = "offscreen"
import pytest
from PySide6.QtCore import QBuffer, QIODevice, QSizeF
from PySide6.QtGui import QColor, QGuiApplication, QImage

from pagemapper.main import main
from pagemapper.models.page_annotation import AnnotationDocument, PageAnnotation
from pagemapper.services.export_manager import ExportError, ExportManager
from pagemapper.services.export_settings import ExportSettings
from pagemapper.services.render_cache import ImageLoadError, RenderCache, decode_data_url

from conftest import DummyPage

app = QGuiApplication.instance() or QGuiApplication(sys.argv)


# ── FIXTURES ────────────────────────────────────────────────────────────────

def png_data_url(color=QColor(255, 0, 0)):
    img = QImage(4, 4, QImage.Format_ARGB32)
    img.fill(color)
    buf = QBuffer()
    buf.open(QIODevice.WriteOnly)
    img.save(buf, "PNG")
    return "data:image/png;base64," + base64.b64encode(buf.data().data()).decode("ascii")


def page_blob(objects, **extra):
    blob = {
        "viewportDimensions": {"width": 600, "height": 800},
        "fabricJSON": {"objects": objects},
    }
    blob.update(extra)
    return blob


TEXT = {"type": "textbox", "left": 50, "top": 60, "width": 200, "height": 30,
        "text": "Signed", "fontSize": 24, "fill": "#003366", "underline": True, "angle": 15}


@pytest.fixture
def image_obj():
    return {"type": "image", "left": 300, "top": 400, "width": 4, "height": 4,
            "scaleX": 20, "scaleY": 10, "flipX": True, "src": png_data_url()}


@pytest.fixture
def document(image_obj):
    return AnnotationDocument.from_dict({"pages": {
        "1": page_blob([TEXT, image_obj]),
        "2": page_blob([TEXT], cropBox={"x": 0, "y": 0, "width": 300, "height": 400}, rotation=90),
    }})


# ── EXPORT ──────────────────────────────────────────────────────────────────

def test_export_writes_pdf(tmp_path, document):
    manager = ExportManager()
    out = manager.export_pdf(document, tmp_path / "out" / "annotated.pdf")
    assert out.is_file()
    assert out.read_bytes()[:5] == b"%PDF-"
    assert manager.stats == {"rendered": 3, "skipped": 0, "errors": 0}


def test_empty_document_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        ExportManager().export_pdf(AnnotationDocument(), tmp_path / "empty.pdf")


def test_page_size_follows_crop_box(document):
    manager = ExportManager(ExportSettings(page_size="letter"))
    assert manager.page_size_for(document.pages[1]) == QSizeF(612, 792)
    assert manager.page_size_for(document.pages[2]) == QSizeF(300, 400)


def test_quarter_turned_page_is_written_landscape(document):
    manager = ExportManager(ExportSettings(page_size="letter"))
    assert manager.rendered_size_for(document.pages[1]) == QSizeF(612, 792)
    # page 2 is rotated 90 degrees
    assert manager.rendered_size_for(document.pages[2]) == QSizeF(400, 300)


# ── ERROR POLICY ────────────────────────────────────────────────────────────

def broken_page():
    return PageAnnotation.from_dict(page_blob([
        {"type": "image", "width": 10, "height": 10, "src": "/nonexistent/picture.png"},
        TEXT,
    ]))


def test_skip_policy_continues_after_failure():
    manager = ExportManager(ExportSettings(on_error="skip"))
    skipped = []
    manager.hub.object_skipped.connect(lambda obj, reason: skipped.append(reason))
    page = DummyPage()
    drawn = manager.render_page(broken_page(), page, QSizeF(300, 400))
    assert drawn == 1
    assert manager.stats["skipped"] == 1
    assert "not found" in skipped[0]
    # failed image never opened a state; the text got exactly one pair
    assert len(page.named("push_state")) == len(page.named("pop_state")) == 1


def test_abort_policy_raises_chained_error():
    manager = ExportManager(ExportSettings(on_error="abort"))
    with pytest.raises(ExportError) as info:
        manager.render_page(broken_page(), DummyPage(), QSizeF(300, 400))
    assert isinstance(info.value.__cause__, ImageLoadError)


def test_backend_failure_is_isolated_per_object():
    manager = ExportManager()
    page = DummyPage(fail_on="draw_text")
    ann = PageAnnotation.from_dict(page_blob([TEXT, TEXT]))
    assert manager.render_page(ann, page, QSizeF(300, 400)) == 0
    assert manager.stats["errors"] == 2
    assert len(page.named("push_state")) == len(page.named("pop_state")) == 2


def test_unknown_error_policy_rejected():
    with pytest.raises(ValueError):
        ExportSettings(on_error="retry")


# ── DIAGNOSTICS ─────────────────────────────────────────────────────────────

def test_debug_traces_every_object(capsys):
    manager = ExportManager(ExportSettings(debug=True))
    traces = []
    manager.hub.transform_traced.connect(lambda trace: traces.append(trace))
    ann = PageAnnotation.from_dict(page_blob([TEXT]))
    manager.render_page(ann, DummyPage(), QSizeF(300, 400))
    assert len(traces) == 1
    assert traces[0].ratios == (0.5, 0.5)
    assert "[EXPORT]" in capsys.readouterr().out


def test_no_trace_output_without_debug(capsys):
    manager = ExportManager()
    traces = []
    manager.hub.transform_traced.connect(lambda trace: traces.append(trace))
    manager.render_page(PageAnnotation.from_dict(page_blob([TEXT])), DummyPage(), QSizeF(300, 400))
    assert traces == []
    assert "[EXPORT]" not in capsys.readouterr().out


def test_toggling_debug_attaches_console(capsys):
    settings = ExportSettings()
    manager = ExportManager(settings)
    settings.debug = True
    manager.render_page(PageAnnotation.from_dict(page_blob([TEXT])), DummyPage(), QSizeF(300, 400))
    assert "[EXPORT]" in capsys.readouterr().out


# ── CACHE ───────────────────────────────────────────────────────────────────

def test_cache_reuses_decoded_images_and_fonts():
    cache = RenderCache()
    url = png_data_url()
    first = cache.image(url)
    assert first.width() == 4
    assert cache.image(url) is first
    assert cache.font("Sans") is cache.font("Sans")


def test_plain_data_url_decodes():
    raw, mime = decode_data_url("data:text/plain,hello%20world")
    assert raw == b"hello world" and mime == "text/plain"
    with pytest.raises(ImageLoadError):
        decode_data_url("nope")


def test_undecodable_image_raises():
    with pytest.raises(ImageLoadError):
        RenderCache().image("data:image/png;base64," + base64.b64encode(b"not a png").decode())


# ── CLI ─────────────────────────────────────────────────────────────────────

def test_cli_exports(tmp_path, document, capsys):
    src = tmp_path / "annotations.json"
    src.write_text(json.dumps(document.to_dict()), encoding="utf-8")
    out = tmp_path / "cli.pdf"
    assert main([str(src), "-o", str(out)]) == 0
    assert out.read_bytes()[:5] == b"%PDF-"
    assert "3 rendered" in capsys.readouterr().out


def test_cli_rejects_non_pdf_output(tmp_path):
    src = tmp_path / "annotations.json"
    src.write_text("{}", encoding="utf-8")
    with pytest.raises(SystemExit) as info:
        main([str(src), "-o", str(tmp_path / "out.png")])
    assert info.value.code == 2


def test_cli_reports_page_without_viewport(tmp_path, capsys):
    src = tmp_path / "annotations.json"
    src.write_text(json.dumps({"pages": {"1": {"fabricJSON": {"objects": [TEXT]}}}}), encoding="utf-8")
    with pytest.raises(SystemExit) as info:
        main([str(src), "-o", str(tmp_path / "out.pdf")])
    assert info.value.code == 2
    assert "viewportDimensions" in capsys.readouterr().err
