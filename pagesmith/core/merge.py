"""Content merging: binds editable fields to text slots and renders instances.

A template's markup is scanned once, when the registry is built. Each editable
field resolves to a ``Slot``: the character span of the first run of text
inside the first element its selector matches. Rendering splices the escaped
override values into those spans and copies everything else verbatim, so a
block with no overrides renders byte-for-byte as its template.

Selectors name element identity only: ``tag``, ``.class``, ``#id`` or a
combination such as ``button.btn-primary``. When several elements match one
selector, only the first is addressable; the extra matches are counted on the
slot and otherwise ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from markupsafe import escape

from ..errors import InvalidTemplate, TemplateMissing
from .models import BlockInstance, BlockTemplate, EditableField, FieldKind

if TYPE_CHECKING:  # pragma: no cover
    from .registry import BlockRegistry

log = logging.getLogger(__name__)

VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})

PLACEHOLDER_MARKUP = (
    '<section class="pagesmith-missing" data-template-id="{template_id}">'
    "<p>This block is no longer available.</p>"
    "</section>"
)

_SELECTOR_RE = re.compile(
    r"^(?P<tag>[a-zA-Z][a-zA-Z0-9-]*)?(?P<rest>(?:[.#][A-Za-z_][\w-]*)*)$")
_SELECTOR_PART_RE = re.compile(r"([.#])([A-Za-z_][\w-]*)")


@dataclass(frozen=True)
class Selector:
    tag: Optional[str]
    classes: FrozenSet[str]
    element_id: Optional[str]

    @classmethod
    def parse(cls, text: str) -> "Selector":
        text = text.strip()
        match = _SELECTOR_RE.match(text)
        if not text or match is None:
            raise ValueError(f"unsupported selector {text!r}")
        classes = set()
        element_id = None
        for prefix, name in _SELECTOR_PART_RE.findall(match.group("rest")):
            if prefix == ".":
                classes.add(name)
            elif element_id is None:
                element_id = name
            else:
                raise ValueError(f"selector {text!r} names more than one id")
        tag = match.group("tag")
        return cls(tag.lower() if tag else None, frozenset(classes), element_id)

    def matches(self, tag: str, attrs: Sequence[Tuple[str, Optional[str]]]) -> bool:
        if self.tag is not None and tag != self.tag:
            return False
        values: Dict[str, str] = {}
        for name, value in attrs:
            values.setdefault(name, value or "")
        if self.element_id is not None and values.get("id") != self.element_id:
            return False
        return self.classes.issubset(values.get("class", "").split())


@dataclass(frozen=True)
class Slot:
    selector: str
    start: int
    end: int
    default: str
    matches: int = 1


@dataclass(frozen=True)
class Rendered:
    markup: str
    missing: Optional[TemplateMissing] = None


class _SlotScanner(HTMLParser):
    """Walks raw markup keeping source offsets for every text run."""

    def __init__(self, markup: str, selectors: Mapping[str, Selector]) -> None:
        super().__init__(convert_charrefs=False)
        self.markup = markup
        self.selectors = dict(selectors)
        self.counts: Dict[str, int] = {name: 0 for name in selectors}
        self.spans: Dict[str, Tuple[int, int]] = {}
        self.void: List[str] = []
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", markup)]
        self._open: Dict[str, List[str]] = {}
        self._content_start: Dict[str, int] = {}
        self._run_start: Optional[int] = None

    def scan(self) -> None:
        self.feed(self.markup)
        self.close()
        self._end_run(len(self.markup))
        # Elements left open by sloppy markup bind an empty slot.
        for name in list(self._open):
            self._bind_empty(name)

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    # text runs ---------------------------------------------------------
    def _text(self) -> None:
        if self._run_start is None:
            self._run_start = self._offset()

    def handle_data(self, data: str) -> None:
        self._text()

    def handle_entityref(self, name: str) -> None:
        self._text()

    def handle_charref(self, name: str) -> None:
        self._text()

    def _end_run(self, end: int) -> None:
        start, self._run_start = self._run_start, None
        if start is None:
            return
        raw = self.markup[start:end]
        if not raw.strip():
            return
        lead = len(raw) - len(raw.lstrip())
        trail = len(raw) - len(raw.rstrip())
        span = (start + lead, end - trail)
        for name in list(self._open):
            self.spans[name] = span
            del self._open[name]

    def _boundary(self) -> int:
        offset = self._offset()
        self._end_run(offset)
        return offset

    def _bind_empty(self, name: str) -> None:
        point = self._content_start[name]
        self.spans[name] = (point, point)
        self._open.pop(name, None)

    # tags --------------------------------------------------------------
    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        offset = self._boundary()
        void = tag in VOID_ELEMENTS
        for stack in self._open.values():
            if not void:
                stack.append(tag)
        for name, selector in self.selectors.items():
            if not selector.matches(tag, attrs):
                continue
            self.counts[name] += 1
            if self.counts[name] > 1:
                continue
            if void:
                self.void.append(name)
                continue
            self._open[name] = [tag]
            self._content_start[name] = offset + len(self.get_starttag_text() or "")

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._boundary()
        for name, selector in self.selectors.items():
            if selector.matches(tag, attrs):
                self.counts[name] += 1
                if self.counts[name] == 1:
                    self.void.append(name)

    def handle_endtag(self, tag: str) -> None:
        self._boundary()
        for name, stack in list(self._open.items()):
            if tag not in stack:
                continue
            while stack.pop() != tag:
                pass
            if not stack:
                self._bind_empty(name)

    def handle_comment(self, data: str) -> None:
        self._boundary()

    def handle_decl(self, decl: str) -> None:
        self._boundary()

    def handle_pi(self, data: str) -> None:
        self._boundary()

    def unknown_decl(self, data: str) -> None:
        self._boundary()


def resolve_slots(template: BlockTemplate) -> Dict[str, Slot]:
    """Bind every editable field of ``template`` to its slot in the markup."""

    selectors: Dict[str, Selector] = {}
    for editable in template.editable_fields:
        if editable.selector in selectors:
            raise InvalidTemplate(
                template.template_id, f"field {editable.selector!r} is declared twice")
        try:
            selectors[editable.selector] = Selector.parse(editable.selector)
        except ValueError as exc:
            raise InvalidTemplate(template.template_id, str(exc)) from exc

    scanner = _SlotScanner(template.markup, selectors)
    scanner.scan()

    slots: Dict[str, Slot] = {}
    taken: Dict[Tuple[int, int], str] = {}
    for name in selectors:
        if scanner.counts[name] == 0:
            raise InvalidTemplate(
                template.template_id, f"selector {name!r} matches no element")
        if name in scanner.void:
            raise InvalidTemplate(
                template.template_id, f"selector {name!r} binds an element without text")
        span = scanner.spans[name]
        if span in taken:
            raise InvalidTemplate(
                template.template_id,
                f"fields {taken[span]!r} and {name!r} bind the same text")
        taken[span] = name
        start, end = span
        count = scanner.counts[name]
        if count > 1:
            log.debug(
                "Template %s: selector %r matches %d elements; only the first is editable",
                template.template_id, name, count)
        slots[name] = Slot(name, start, end, template.markup[start:end], count)
    return slots


def format_value(value: str, kind: FieldKind = FieldKind.TEXT) -> str:
    if kind is FieldKind.MULTILINE_TEXT:
        return "<br>".join(str(escape(line)) for line in value.splitlines())
    return str(escape(value))


def merge_content(
    template: BlockTemplate,
    slots: Mapping[str, Slot],
    content: Mapping[str, str],
) -> str:
    markup = template.markup
    edits: List[Tuple[Slot, str]] = []
    for selector, value in content.items():
        slot = slots.get(selector)
        if slot is None:
            continue
        editable: Optional[EditableField] = template.field(selector)
        kind = editable.kind if editable else FieldKind.TEXT
        edits.append((slot, format_value(value, kind)))
    if not edits:
        return markup
    pieces: List[str] = []
    cursor = 0
    for slot, text in sorted(edits, key=lambda edit: edit[0].start):
        pieces.append(markup[cursor:slot.start])
        pieces.append(text)
        cursor = slot.end
    pieces.append(markup[cursor:])
    return "".join(pieces)


def placeholder_markup(template_id: str) -> str:
    return PLACEHOLDER_MARKUP.format(template_id=escape(template_id))


class MergeEngine:
    """Renders block instances against a registry snapshot."""

    def __init__(self, registry: "BlockRegistry") -> None:
        self.registry = registry

    def render(self, instance: BlockInstance) -> Rendered:
        template = self.registry.find_template(instance.template_id)
        if template is None:
            missing = TemplateMissing(instance.instance_id, instance.template_id)
            log.warning("%s; rendering placeholder", missing)
            return Rendered(placeholder_markup(instance.template_id), missing)
        slots = self.registry.slots_for(template.template_id)
        return Rendered(merge_content(template, slots, instance.content))

    def render_markup(self, instance: BlockInstance) -> str:
        return self.render(instance).markup
