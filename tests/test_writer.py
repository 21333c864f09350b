from datetime import datetime, timezone

from paper_dump.models import DocumentResult
from paper_dump.writer import image_dir_name, render_document, write_document, write_index


def test_render_document_header():
    text = render_document(
        "Notes", "body\n\n", "https://paper.dropbox.com/doc/abc", "ann@example.com",
        downloaded_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    )
    assert text == (
        "# Notes\n\n"
        "*Downloaded on 2024-05-01 09:30 UTC from <https://paper.dropbox.com/doc/abc>, owned by ann@example.com*\n\n"
        "body\n"
    )


def test_render_document_without_owner():
    text = render_document("T", "b", "https://x", downloaded_at=datetime(2024, 1, 1))
    assert "owned by" not in text


def test_image_dir_name_is_unique():
    taken = set()
    assert image_dir_name("Notes", "id1", taken) == "notes"
    assert image_dir_name("notes", "id2", taken) == "notes-id2"
    assert image_dir_name("", "ID3", taken) == "id3"


def test_write_document_overwrites(config):
    config.output_dir.mkdir(parents=True)
    assert write_document(config, "Doc", "first") == "Doc.md"
    write_document(config, "Doc", "second")
    assert (config.output_dir / "Doc.md").read_text(encoding="utf-8") == "second"


def test_write_index_escapes_titles(config):
    config.output_dir.mkdir(parents=True)
    results = [
        DocumentResult(doc_id="b", title="<B & co>", owner="o", path="_B & co_.md"),
        DocumentResult(doc_id="a", title="alpha", path="alpha.md"),
        DocumentResult(doc_id="c", title="failed"),
    ]

    write_index(config, results)

    index = (config.output_dir / "index.html").read_text(encoding="utf-8")
    assert "&lt;B &amp; co&gt;" in index
    assert 'href="_B%20%26%20co_.md"' in index
    assert index.index("&lt;B") < index.index("alpha")
    assert "failed" not in index
