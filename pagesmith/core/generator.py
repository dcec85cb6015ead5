"""Static site export: one page state in, index.html / style.css / script.js out."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import BinaryIO, Iterable, List, Union

from jinja2 import DictLoader, Environment, select_autoescape

from .merge import MergeEngine
from .models import BlockTemplate, ExportBundle, PageState
from .registry import BlockRegistry

log = logging.getLogger(__name__)

DOCUMENT_NAME = "index.html"
STYLESHEET_NAME = "style.css"
SCRIPT_NAME = "script.js"
ASSETS_DIR = "assets/"
UTILITY_FRAMEWORK_HREF = "https://cdn.tailwindcss.com"
FORM_CATEGORY = "form"

# Zip entries get a fixed timestamp so that equal bundles give equal archives.
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

BASE_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <link rel="stylesheet" href="{{ stylesheet_href }}">
    <script src="{{ framework_href }}"></script>
</head>
<body>
{{ content | safe }}
    <script src="{{ script_href }}"></script>
</body>
</html>
"""

BASE_CSS = """\
/* PageSmith Generated Styles */

/* Reset and base styles */
* {
    margin: 0;
    padding: 0;
    box-sizing: border-box;
}

body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
    line-height: 1.6;
    color: #333;
}
"""

RESPONSIVE_CSS = """\
/* Responsive utilities */
@media (max-width: 768px) {
    .container {
        padding: 0 1rem;
    }

    .grid {
        grid-template-columns: 1fr;
    }
}
"""

MAIN_JS_SNIPPET = """\
// PageSmith Generated JavaScript

document.addEventListener('DOMContentLoaded', function() {
    // Smooth scrolling for anchor links
    document.querySelectorAll('a[href^="#"]').forEach(anchor => {
        anchor.addEventListener('click', function (e) {
            const href = this.getAttribute('href');
            if (href === '#') {
                return;
            }
            const target = document.querySelector(href);
            if (target) {
                e.preventDefault();
                target.scrollIntoView({
                    behavior: 'smooth'
                });
            }
        });
    });
"""

FORM_JS_SNIPPET = """
    // Form handling
    document.querySelectorAll('form').forEach(form => {
        form.addEventListener('submit', function(e) {
            e.preventDefault();

            const formData = new FormData(this);
            const data = Object.fromEntries(formData);

            // Replace this with your own form submission logic
            console.log('Form submitted:', data);
            alert('Thank you for your message! We\\'ll get back to you soon.');

            this.reset();
        });
    });
"""

SCRIPT_FOOTER = "});\n"


def _jinja_env() -> Environment:
    return Environment(
        loader=DictLoader({"index.html.j2": BASE_TEMPLATE}),
        autoescape=select_autoescape(["html", "xml", "j2"]),
        keep_trailing_newline=True,
    )


class Exporter:
    """Turns a page state into an ``ExportBundle`` using a registry snapshot."""

    def __init__(self, registry: BlockRegistry) -> None:
        self.registry = registry
        self.merge = MergeEngine(registry)
        self._template = _jinja_env().get_template("index.html.j2")

    def _templates_in_order(self, state: PageState) -> List[BlockTemplate]:
        seen: List[BlockTemplate] = []
        for block in state.blocks:
            template = self.registry.find_template(block.template_id)
            if template is not None and template not in seen:
                seen.append(template)
        return seen

    def document_markup(self, state: PageState) -> str:
        content = "\n".join(self.merge.render_markup(block) for block in state.blocks)
        return self._template.render(
            title=state.title,
            content=content,
            stylesheet_href=STYLESHEET_NAME,
            script_href=SCRIPT_NAME,
            framework_href=UTILITY_FRAMEWORK_HREF,
        )

    def stylesheet(self, state: PageState) -> str:
        # One fragment per placed block, so a template used twice appears twice.
        fragments = []
        for block in state.blocks:
            template = self.registry.find_template(block.template_id)
            if template is not None and template.css.strip():
                fragments.append(template.css.strip())
        parts = [BASE_CSS, "/* Custom block styles */", *fragments, "", RESPONSIVE_CSS]
        return "\n".join(parts)

    def behavior_script(self, state: PageState) -> str:
        categories = {t.category for t in self._templates_in_order(state)}
        return build_script(categories)

    def build(self, state: PageState) -> ExportBundle:
        bundle = ExportBundle(
            document_markup=self.document_markup(state),
            stylesheet=self.stylesheet(state),
            behavior_script=self.behavior_script(state),
        )
        log.debug("Built bundle for %d blocks", len(state.blocks))
        return bundle


def build_script(categories: Iterable[str]) -> str:
    script = MAIN_JS_SNIPPET
    if FORM_CATEGORY in set(categories):
        script += FORM_JS_SNIPPET
    return script + SCRIPT_FOOTER


def build_bundle(state: PageState, registry: BlockRegistry) -> ExportBundle:
    return Exporter(registry).build(state)


def _bundle_files(bundle: ExportBundle) -> List[tuple]:
    return [
        (DOCUMENT_NAME, bundle.document_markup),
        (STYLESHEET_NAME, bundle.stylesheet),
        (SCRIPT_NAME, bundle.behavior_script),
    ]


def write_archive(bundle: ExportBundle, target: Union[str, Path, BinaryIO]) -> None:
    """Write the bundle as a zip with the three files and an empty ``assets/``."""

    if isinstance(target, (str, Path)):
        Path(target).parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, text in _bundle_files(bundle):
            info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, text.encode("utf-8"))
        folder = zipfile.ZipInfo(ASSETS_DIR, date_time=ZIP_TIMESTAMP)
        folder.external_attr = (0o40755 << 16) | 0x10
        zf.writestr(folder, b"")


def archive_bytes(bundle: ExportBundle) -> bytes:
    buffer = io.BytesIO()
    write_archive(bundle, buffer)
    return buffer.getvalue()


def export_archive(
    state: PageState,
    registry: BlockRegistry,
    target: Union[str, Path, BinaryIO],
) -> ExportBundle:
    bundle = build_bundle(state, registry)
    write_archive(bundle, target)
    return bundle


def write_site(bundle: ExportBundle, output_dir: str | Path) -> Path:
    """Write the bundle into a folder, the same layout as the archive."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    (output_dir / ASSETS_DIR).mkdir(exist_ok=True)
    for name, text in _bundle_files(bundle):
        (output_dir / name).write_text(text, encoding="utf-8", newline="\n")
    return output_dir
