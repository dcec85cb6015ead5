from __future__ import annotations

import io
import sys
import zipfile
from pathlib import Path

from bs4 import BeautifulSoup

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagesmith.core.generator import (
    ZIP_TIMESTAMP,
    archive_bytes,
    build_bundle,
    build_script,
    export_archive,
    write_archive,
    write_site,
)
from pagesmith.core.models import BlockInstance, BlockTemplate, EditableField, FieldKind, PageState
from pagesmith.core.registry import BlockRegistry, default_registry


def _page(*template_ids: str, title: str = "Launch") -> PageState:
    blocks = [BlockInstance(f"block-{i}", t) for i, t in enumerate(template_ids)]
    return PageState(blocks=blocks, title=title)


def test_document_structure() -> None:
    bundle = build_bundle(_page("hero-simple", "footer-simple"), default_registry())
    soup = BeautifulSoup(bundle.document_markup, "html.parser")

    assert bundle.document_markup.startswith("<!DOCTYPE html>")
    assert soup.find("meta", charset=True)["charset"] == "UTF-8"
    viewport = soup.find("meta", attrs={"name": "viewport"})
    assert "width=device-width" in viewport["content"]
    assert soup.title.string == "Launch"

    link = soup.head.find("link", rel="stylesheet")
    assert link["href"] == "style.css"
    assert soup.head.find("script")["src"].startswith("https://")

    last = soup.body.find_all(recursive=False)[-1]
    assert last.name == "script"
    assert last["src"] == "script.js"
    assert bundle.document_markup.index('href="style.css"') < bundle.document_markup.index(
        'src="script.js"')


def test_blocks_appear_in_page_order_with_content() -> None:
    state = _page("footer-simple", "hero-simple")
    state.blocks[1].content["h1"] = "Spring Sale"
    markup = build_bundle(state, default_registry()).document_markup
    assert markup.index("<footer") < markup.index("Spring Sale")
    assert "Build Amazing Landing Pages" not in markup


def test_title_is_escaped() -> None:
    bundle = build_bundle(_page(title="Tom & Jerry <live>"), default_registry())
    assert "<title>Tom &amp; Jerry &lt;live&gt;</title>" in bundle.document_markup


def test_build_is_deterministic() -> None:
    registry = default_registry()
    state = _page("hero-simple", "contact-form", "footer-simple")
    first = build_bundle(state, registry)
    second = build_bundle(state, registry)
    assert first == second
    assert archive_bytes(first) == archive_bytes(second)


def test_form_script_only_with_form_blocks() -> None:
    registry = default_registry()
    without = build_bundle(_page("hero-simple", "cta-section"), registry).behavior_script
    with_form = build_bundle(_page("hero-simple", "contact-form"), registry).behavior_script

    assert "Smooth scrolling" in without
    assert "addEventListener('submit'" not in without
    assert "addEventListener('submit'" in with_form
    assert with_form.rstrip().endswith("});")
    assert build_script(["form"]) == with_form


def test_stylesheet_has_one_fragment_per_block() -> None:
    def template(template_id: str, css: str) -> BlockTemplate:
        return BlockTemplate(
            template_id=template_id,
            name=template_id,
            category="content",
            markup="<h2>Title</h2>",
            editable_fields=(EditableField("h2", FieldKind.TEXT, "Title"),),
            css=css,
        )

    registry = BlockRegistry([
        template("a", ".a { color: red; }"),
        template("b", ""),
        template("c", ".c { color: blue; }"),
    ])
    css = build_bundle(_page("c", "a", "b", "retired", "a"), registry).stylesheet

    assert css.startswith("/* PageSmith Generated Styles */")
    assert css.count(".a { color: red; }") == 2
    assert css.count(".c { color: blue; }") == 1
    custom = css[css.index("/* Custom block styles */"):css.index("/* Responsive utilities */")]
    assert custom.split("\n")[1:4] == [".c { color: blue; }", ".a { color: red; }", ".a { color: red; }"]


def test_missing_templates_export_as_placeholders() -> None:
    state = PageState([BlockInstance("block-x", "retired"), BlockInstance("block-y", "hero-simple")])
    bundle = build_bundle(state, default_registry())
    assert 'data-template-id="retired"' in bundle.document_markup
    assert "Build Amazing Landing Pages" in bundle.document_markup


def test_archive_contents() -> None:
    bundle = build_bundle(_page("hero-simple", "contact-form"), default_registry())
    buffer = io.BytesIO()
    write_archive(bundle, buffer)

    with zipfile.ZipFile(io.BytesIO(buffer.getvalue())) as zf:
        assert zf.namelist() == ["index.html", "style.css", "script.js", "assets/"]
        assert zf.read("index.html").decode("utf-8") == bundle.document_markup
        assert zf.read("style.css").decode("utf-8") == bundle.stylesheet
        assert zf.read("script.js").decode("utf-8") == bundle.behavior_script
        assert zf.getinfo("assets/").is_dir()
        assert all(info.date_time == ZIP_TIMESTAMP for info in zf.infolist())


def test_export_archive_to_path(tmp_path: Path) -> None:
    target = tmp_path / "out" / "site.zip"
    bundle = export_archive(_page("cta-section"), default_registry(), target)
    with zipfile.ZipFile(target) as zf:
        assert zf.read("index.html").decode("utf-8") == bundle.document_markup


def test_write_site_matches_archive_layout(tmp_path: Path) -> None:
    bundle = build_bundle(_page("hero-simple"), default_registry())
    out = write_site(bundle, tmp_path / "site")

    assert sorted(p.name for p in out.iterdir()) == ["assets", "index.html", "script.js", "style.css"]
    assert (out / "assets").is_dir()
    assert (out / "index.html").read_text(encoding="utf-8") == bundle.document_markup
