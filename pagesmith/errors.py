"""Exception types shared by the page engine."""

from __future__ import annotations


class PageSmithError(Exception):
    """Base class for every error raised by pagesmith."""


class TemplateNotFound(PageSmithError, LookupError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Unknown block template: {template_id!r}")
        self.template_id = template_id


class UnknownTemplate(TemplateNotFound):
    """Raised when a block is added from a template the registry does not hold."""


class InvalidTemplate(PageSmithError, ValueError):
    def __init__(self, template_id: str, reason: str) -> None:
        super().__init__(f"Template {template_id!r} is invalid: {reason}")
        self.template_id = template_id
        self.reason = reason


class TemplateMissing(PageSmithError):
    """Render-time condition for an instance whose template disappeared.

    The merge engine hands this back alongside the placeholder markup instead
    of raising it.
    """

    def __init__(self, instance_id: str, template_id: str) -> None:
        super().__init__(
            f"Block {instance_id!r} references missing template {template_id!r}")
        self.instance_id = instance_id
        self.template_id = template_id


class GenerationError(PageSmithError):
    """The content service could not generate text."""


class ImprovementError(GenerationError):
    """The content service could not improve the given text."""


class PersistenceError(PageSmithError):
    """A persistence store failed to save or clear a blob."""
