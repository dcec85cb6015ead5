"""Data models for the page builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

DEFAULT_PAGE_TITLE = "My Landing Page"


class FieldKind(str, Enum):
    TEXT = "text"
    MULTILINE_TEXT = "multilineText"


@dataclass(frozen=True)
class EditableField:
    selector: str
    kind: FieldKind
    label: str

    def to_dict(self) -> dict:
        return {"selector": self.selector, "kind": self.kind.value, "label": self.label}

    @classmethod
    def from_dict(cls, data: dict) -> "EditableField":
        return cls(
            selector=data["selector"],
            kind=FieldKind(data.get("kind", FieldKind.TEXT.value)),
            label=data.get("label", data["selector"]),
        )


@dataclass(frozen=True)
class BlockTemplate:
    """A reusable page section: raw markup plus the parts a user may edit."""

    template_id: str
    name: str
    category: str
    markup: str
    editable_fields: Tuple[EditableField, ...] = ()
    preview_markup: str = ""
    description: str = ""
    css: str = ""  # per-block custom style fragment

    def field(self, selector: str) -> Optional[EditableField]:
        for editable in self.editable_fields:
            if editable.selector == selector:
                return editable
        return None

    @property
    def selectors(self) -> List[str]:
        return [editable.selector for editable in self.editable_fields]


@dataclass
class BlockInstance:
    """A template placed on a page together with the user's text overrides."""

    instance_id: str
    template_id: str
    content: Dict[str, str] = field(default_factory=dict)

    def copy(self) -> "BlockInstance":
        return BlockInstance(self.instance_id, self.template_id, dict(self.content))

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "template_id": self.template_id,
            "content": dict(self.content),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BlockInstance":
        return cls(
            instance_id=data["instance_id"],
            template_id=data["template_id"],
            content=dict(data.get("content") or {}),
        )


@dataclass
class PageState:
    blocks: List[BlockInstance] = field(default_factory=list)
    title: str = DEFAULT_PAGE_TITLE

    def instance_ids(self) -> List[str]:
        return [block.instance_id for block in self.blocks]

    def copy(self) -> "PageState":
        return PageState([block.copy() for block in self.blocks], self.title)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PageState":
        blocks = [BlockInstance.from_dict(b) for b in data.get("blocks", [])]
        return cls(blocks=blocks, title=data.get("title") or DEFAULT_PAGE_TITLE)


@dataclass(frozen=True)
class ExportBundle:
    document_markup: str
    stylesheet: str
    behavior_script: str
