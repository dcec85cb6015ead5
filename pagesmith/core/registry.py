"""Read-only catalog of block templates."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..errors import InvalidTemplate, TemplateNotFound
from .blocks import DEFAULT_BLOCKS
from .merge import Slot, resolve_slots
from .models import BlockTemplate, FieldKind

log = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class BlockRegistry:
    """Holds block templates in a fixed order, with their slots resolved up front.

    The registry is built once and handed to whatever needs template lookups;
    it has no mutation operations. Invalid templates are rejected here so that
    rendering never has to re-validate markup.
    """

    def __init__(self, templates: Iterable[BlockTemplate]) -> None:
        self._templates: Dict[str, BlockTemplate] = {}
        self._slots: Dict[str, Dict[str, Slot]] = {}
        for template in templates:
            if template.template_id in self._templates:
                raise InvalidTemplate(template.template_id, "duplicate template id")
            for editable in template.editable_fields:
                if not isinstance(editable.kind, FieldKind):
                    raise InvalidTemplate(
                        template.template_id,
                        f"field {editable.selector!r} has unknown kind {editable.kind!r}")
            self._slots[template.template_id] = resolve_slots(template)
            self._templates[template.template_id] = template
        self._order: Tuple[BlockTemplate, ...] = tuple(self._templates.values())
        log.debug("Registered %d block templates", len(self._order))

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[BlockTemplate]:
        return iter(self._order)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def list_templates(self) -> Tuple[BlockTemplate, ...]:
        return self._order

    def get_template(self, template_id: str) -> BlockTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def find_template(self, template_id: str) -> Optional[BlockTemplate]:
        return self._templates.get(template_id)

    def slots_for(self, template_id: str) -> Mapping[str, Slot]:
        self.get_template(template_id)
        return dict(self._slots[template_id])

    def defaults_for(self, template_id: str) -> Dict[str, str]:
        """Default text of each editable field, keyed by selector."""

        return {selector: slot.default for selector, slot in self.slots_for(template_id).items()}

    def categories(self) -> List[str]:
        seen: List[str] = []
        for template in self._order:
            if template.category not in seen:
                seen.append(template.category)
        return seen

    def filter_templates(self, category: str = ALL_CATEGORIES, search: str = "") -> List[BlockTemplate]:
        needle = search.strip().lower()
        return [
            template
            for template in self._order
            if (category == ALL_CATEGORIES or template.category == category)
            and needle in template.name.lower()
        ]


def default_registry() -> BlockRegistry:
    return BlockRegistry(DEFAULT_BLOCKS)
