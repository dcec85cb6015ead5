from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagesmith.core.blocks import CTA_SECTION, FOOTER_SIMPLE, HERO_SIMPLE
from pagesmith.core.merge import MergeEngine, Selector, format_value
from pagesmith.core.models import BlockInstance, BlockTemplate, EditableField, FieldKind
from pagesmith.core.registry import BlockRegistry, default_registry
from pagesmith.errors import TemplateMissing


def _engine() -> MergeEngine:
    return MergeEngine(default_registry())


def test_block_without_overrides_renders_template_verbatim() -> None:
    engine = _engine()
    for template in default_registry():
        rendered = engine.render(BlockInstance("b1", template.template_id))
        assert rendered.markup == template.markup
        assert rendered.missing is None


def test_override_replaces_only_the_bound_text() -> None:
    engine = _engine()
    instance = BlockInstance("b1", "hero-simple", {"h1": "Hello"})
    expected = HERO_SIMPLE.markup.replace("Build Amazing Landing Pages", "Hello", 1)
    assert engine.render_markup(instance) == expected


def test_button_override_keeps_surrounding_whitespace() -> None:
    engine = _engine()
    instance = BlockInstance("b1", "cta-section", {"button": "Go"})
    markup = engine.render_markup(instance)
    assert "\n      Go\n    </button>" in markup
    assert markup == CTA_SECTION.markup.replace("Start Building Now", "Go")


def test_values_are_escaped() -> None:
    engine = _engine()
    instance = BlockInstance("b1", "hero-simple", {"h1": "<b>Fish & Chips</b>"})
    markup = engine.render_markup(instance)
    assert "&lt;b&gt;Fish &amp; Chips&lt;/b&gt;" in markup
    assert "<b>" not in markup


def test_multiline_values_become_line_breaks() -> None:
    engine = _engine()
    instance = BlockInstance("b1", "cta-section", {"p": "First line\nSecond <line>"})
    markup = engine.render_markup(instance)
    assert '<p class="text-xl mb-8">First line<br>Second &lt;line&gt;</p>' in markup


def test_plain_text_field_keeps_newlines_as_text() -> None:
    assert format_value("a\nb") == "a\nb"
    assert format_value("a\nb", FieldKind.MULTILINE_TEXT) == "a<br>b"


def test_unknown_selectors_are_ignored() -> None:
    engine = _engine()
    instance = BlockInstance("b1", "footer-simple", {"h6": "Nope", ".missing": "x"})
    assert engine.render_markup(instance) == FOOTER_SIMPLE.markup


def test_several_fields_render_together() -> None:
    engine = _engine()
    instance = BlockInstance(
        "b1", "hero-simple", {"button": "Try it", "h1": "Title", "p": "Body"})
    markup = engine.render_markup(instance)
    assert markup.index(">Title<") < markup.index(">Body<") < markup.index("Try it")


def test_missing_template_renders_placeholder() -> None:
    engine = _engine()
    rendered = engine.render(BlockInstance("b9", "retired-block", {"h1": "x"}))
    assert 'data-template-id="retired-block"' in rendered.markup
    assert "pagesmith-missing" in rendered.markup
    assert isinstance(rendered.missing, TemplateMissing)
    assert rendered.missing.instance_id == "b9"
    assert engine.render(BlockInstance("b9", "retired-block")).markup == rendered.markup


def test_entity_text_binds_as_one_run() -> None:
    template = BlockTemplate(
        template_id="legal",
        name="Legal",
        category="footer",
        markup='<footer><p class="note">&copy; 2024 Acme. All rights reserved.</p></footer>',
        editable_fields=(EditableField(".note", FieldKind.TEXT, "Notice"),),
    )
    registry = BlockRegistry([template])
    assert registry.defaults_for("legal") == {".note": "&copy; 2024 Acme. All rights reserved."}
    markup = MergeEngine(registry).render_markup(
        BlockInstance("b1", "legal", {".note": "(c) Example"}))
    assert markup == '<footer><p class="note">(c) Example</p></footer>'


def test_field_binds_first_text_inside_nested_markup() -> None:
    template = BlockTemplate(
        template_id="nested",
        name="Nested",
        category="content",
        markup='<a class="btn"><span>  </span><strong>Go</strong> now</a>',
        editable_fields=(EditableField(".btn", FieldKind.TEXT, "Link"),),
    )
    engine = MergeEngine(BlockRegistry([template]))
    markup = engine.render_markup(BlockInstance("b1", "nested", {".btn": "Stop"}))
    assert markup == '<a class="btn"><span>  </span><strong>Stop</strong> now</a>'


def test_empty_element_gets_an_insertion_point() -> None:
    template = BlockTemplate(
        template_id="blank",
        name="Blank",
        category="content",
        markup='<h2 class="t"></h2><p>x</p>',
        editable_fields=(EditableField("h2", FieldKind.TEXT, "Title"),),
    )
    registry = BlockRegistry([template])
    assert registry.defaults_for("blank") == {"h2": ""}
    markup = MergeEngine(registry).render_markup(BlockInstance("b1", "blank", {"h2": "New"}))
    assert markup == '<h2 class="t">New</h2><p>x</p>'


def test_only_first_match_is_editable() -> None:
    template = BlockTemplate(
        template_id="twins",
        name="Twins",
        category="content",
        markup="<p>One</p><p>Two</p>",
        editable_fields=(EditableField("p", FieldKind.TEXT, "Text"),),
    )
    engine = MergeEngine(BlockRegistry([template]))
    markup = engine.render_markup(BlockInstance("b1", "twins", {"p": "Changed"}))
    assert markup == "<p>Changed</p><p>Two</p>"


def test_selector_parsing() -> None:
    selector = Selector.parse("button.btn.primary#go")
    assert selector.tag == "button"
    assert selector.classes == frozenset({"btn", "primary"})
    assert selector.element_id == "go"
    assert selector.matches("button", [("class", "primary btn large"), ("id", "go")])
    assert not selector.matches("a", [("class", "primary btn"), ("id", "go")])
