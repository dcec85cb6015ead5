"""Copywriting assistant: a remote text service with a local fallback.

``ContentAssistant`` is the only entry point the rest of the app needs. It asks
the configured ``ContentService`` first and, when that fails for any reason,
answers from ``FallbackWriter`` so that editing keeps working offline.
"""

from __future__ import annotations

import json
import logging
import random
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from threading import RLock
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Union

import requests

from .errors import GenerationError, ImprovementError

log = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class ContentType(str, Enum):
    HEADLINE = "headline"
    PARAGRAPH = "paragraph"
    CTA = "cta"


MAX_TOKENS: Dict[ContentType, int] = {
    ContentType.HEADLINE: 50,
    ContentType.CTA: 20,
    ContentType.PARAGRAPH: 200,
}
IMPROVE_MAX_TOKENS = 300

BASE_CONTEXT = (
    "You are an expert copywriter specializing in high-converting landing pages. "
    "You understand marketing psychology, persuasive writing, and web design best practices."
)

_TASKS: Dict[ContentType, str] = {
    ContentType.HEADLINE: """\
Your task is to create compelling headlines that:
- Grab attention immediately
- Communicate clear value propositions
- Are optimized for conversion
- Use power words and emotional triggers
- Are concise but impactful (under 10 words when possible)""",
    ContentType.PARAGRAPH: """\
Your task is to write engaging paragraphs that:
- Support the main headline or message
- Provide clear benefits and value
- Use persuasive language and social proof
- Are scannable and easy to read
- Are 2-4 sentences long""",
    ContentType.CTA: """\
Your task is to create high-converting call-to-action button text that:
- Creates urgency and desire
- Uses action-oriented language
- Is short and punchy (2-4 words ideal)
- Focuses on benefits, not features""",
}

_ANSWER_HINT: Dict[ContentType, str] = {
    ContentType.HEADLINE: "Return only the headline text, no quotes or explanations.",
    ContentType.PARAGRAPH: "Return only the paragraph text, no quotes or explanations.",
    ContentType.CTA: "Return only the button text, no quotes or explanations.",
}

_CATEGORY_HINTS: Dict[str, str] = {
    "hero": " This is for a hero section that needs to make a strong first impression.",
    "features": " This is for a features section highlighting key benefits.",
    "cta": " This is for a call-to-action section designed to convert visitors.",
}

_TYPE_HINTS: Dict[ContentType, str] = {
    ContentType.HEADLINE: " Create a headline that would make someone stop scrolling and pay attention.",
    ContentType.PARAGRAPH: " Write body text that supports the main message and persuades readers to take action.",
    ContentType.CTA: " Create button text that makes people want to click immediately.",
}

IMPROVE_SYSTEM_PROMPT = """\
You are an expert copywriter and content optimizer specializing in conversion-focused web copy.

Your task is to improve existing content based on specific instructions while maintaining:
- The original intent and meaning
- Appropriate tone and voice
- Professional quality

Always return only the improved content, no explanations or quotes."""

STYLE_SYSTEM_PROMPT = """\
You are a web designer. Suggest styles for a landing page block as a JSON object with the
keys background_color, text_color, font_family, padding and border_radius. Return only JSON."""

STYLE_KEYS = ("background_color", "text_color", "font_family", "padding", "border_radius")


def system_prompt(content_type: ContentType, context: Mapping[str, str]) -> str:
    category = context.get("block_category") or "general"
    return (
        f"{BASE_CONTEXT}\n\n{_TASKS[content_type]}\n\n"
        f"Block context: {category}\n"
        "Target audience: Professional and business users\n\n"
        f"{_ANSWER_HINT[content_type]}"
    )


def optimize_prompt(prompt: str, content_type: ContentType, context: Mapping[str, str]) -> str:
    category = context.get("block_category") or ""
    return prompt + _CATEGORY_HINTS.get(category, "") + _TYPE_HINTS[content_type]


def default_content_type(category: Optional[str]) -> ContentType:
    """Which kind of copy a block category usually asks for."""
    if category in ("content", "features"):
        return ContentType.PARAGRAPH
    if category == "cta":
        return ContentType.CTA
    return ContentType.HEADLINE


class ContentService(Protocol):
    def generate(self, prompt: str, content_type: ContentType, context: Mapping[str, str]) -> str: ...

    def improve(self, content: str, instructions: str) -> str: ...


class OpenAIContentService:
    """Chat-completions client. Every failure surfaces as ``GenerationError``."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        endpoint: str = OPENAI_CHAT_URL,
        timeout: float = 60,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int, error: type) -> str:
        if not self.api_key:
            raise error("OpenAI API key not configured")
        try:
            response = requests.post(
                self.endpoint,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": messages,
                    "max_tokens": max_tokens,
                    "temperature": 0.7,
                },
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise error(f"Request failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise error("Unexpected response payload")
        if response.status_code >= 400 or "error" in payload:
            detail = payload.get("error") or {}
            message = detail.get("message") if isinstance(detail, dict) else str(detail)
            raise error(message or f"Request failed with status {response.status_code}")
        choices = payload.get("choices") or []
        text = ""
        if choices and isinstance(choices[0], dict):
            text = (choices[0].get("message") or {}).get("content") or ""
        text = text.strip()
        if not text:
            raise error("Empty response")
        return text

    def generate(self, prompt: str, content_type: ContentType, context: Mapping[str, str]) -> str:
        content_type = ContentType(content_type)
        messages = [
            {"role": "system", "content": system_prompt(content_type, context)},
            {"role": "user", "content": optimize_prompt(prompt, content_type, context)},
        ]
        return self._complete(messages, MAX_TOKENS[content_type], GenerationError)

    def improve(self, content: str, instructions: str) -> str:
        messages = [
            {"role": "system", "content": IMPROVE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f'Improve this content: "{content}"\n\n'
                           f"Instructions: {instructions}\n\nReturn only the improved version.",
            },
        ]
        return self._complete(messages, IMPROVE_MAX_TOKENS, ImprovementError)

    def suggest_styles(self, category: str, prompt: str) -> Dict[str, str]:
        messages = [
            {"role": "system", "content": STYLE_SYSTEM_PROMPT},
            {"role": "user", "content": f"Block type: {category}\nRequest: {prompt}"},
        ]
        text = self._complete(messages, 200, GenerationError)
        try:
            styles = json.loads(text)
        except ValueError as exc:
            raise GenerationError(f"Style answer is not JSON: {exc}") from exc
        if not isinstance(styles, dict):
            raise GenerationError("Style answer is not a JSON object")
        return {key: str(styles[key]) for key in STYLE_KEYS if key in styles}


HEADLINES = (
    "Transform Your Online Presence Today",
    "Build Beautiful Websites Without Code",
    "Create Landing Pages That Convert",
    "Design Like a Pro, No Experience Required",
    "Your Vision, Our Technology",
    "Websites That Work As Hard As You Do",
    "Stunning Designs Made Simple",
    "Unlock Your Website's Potential",
)

PARAGRAPHS = (
    "Our intuitive drag-and-drop builder makes website creation accessible to everyone. "
    "No coding skills required, just your creativity and our powerful tools. Build "
    "professional-looking pages in minutes that would normally take days with traditional methods.",
    "Stand out from the competition with a beautifully designed website that captures your "
    "brand's essence. Our templates are crafted by professional designers and optimized for "
    "engagement, ensuring your visitors stay longer and convert better.",
    "Every business deserves a great website. Our platform provides enterprise-level features "
    "at prices small businesses can afford. Start with our free tier and scale as you grow, with "
    "no hidden fees or complicated upgrade paths.",
    "Join thousands of satisfied customers who have transformed their online presence with our "
    "platform. Our average user launches their first page within 30 minutes of signing up.",
)

CTAS = (
    "Get Started Free",
    "Start Building Now",
    "Try It Free",
    "Launch Your Site",
    "Join Free For 14 Days",
    "See It In Action",
    "Create Your Page",
    "Start Your Free Trial",
)

HERO_PARAGRAPH = (
    "Create stunning landing pages in minutes with our intuitive drag-and-drop builder. No coding "
    "required. Start with professionally designed templates and customize every element to match "
    "your brand. Launch faster and convert better with PageSmith."
)
FEATURES_PARAGRAPH = (
    "Our platform offers everything you need to build high-converting pages. Enjoy responsive "
    "designs, SEO optimization, fast loading speeds, and built-in analytics, all without touching "
    "a line of code."
)

_PROFESSIONAL_WORDS = (
    ("amazing", "exceptional"),
    ("great", "premium"),
    ("good", "high-quality"),
    ("fast", "efficient"),
    ("easy", "streamlined"),
)
_ENHANCE_WORDS = (
    ("website", "professional website"),
    ("build", "create"),
    ("make", "design"),
    ("get", "obtain"),
)


def _has(text: str, *words: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in words)


def _replace_words(text: str, pairs) -> str:
    for old, new in pairs:
        text = re.sub(re.escape(old), new, text, flags=re.IGNORECASE)
    return text


class FallbackWriter:
    """Offline copy: keyword matches first, otherwise a pick from fixed lists."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def headline(self, prompt: str, context: Mapping[str, str]) -> str:
        if _has(prompt, "professional"):
            return "Professional Websites Built in Minutes"
        if _has(prompt, "easy", "simple"):
            return "Simple Website Building for Everyone"
        if _has(prompt, "fast", "quick"):
            return "Launch Your Website in Record Time"
        return self.rng.choice(HEADLINES)

    def paragraph(self, prompt: str, context: Mapping[str, str]) -> str:
        category = context.get("block_category")
        if category == "hero":
            return HERO_PARAGRAPH
        if category == "features":
            return FEATURES_PARAGRAPH
        return self.rng.choice(PARAGRAPHS)

    def cta(self, prompt: str, context: Mapping[str, str]) -> str:
        if _has(prompt, "buy", "purchase"):
            return "Buy Now"
        if _has(prompt, "learn", "more"):
            return "Learn More"
        if _has(prompt, "contact", "support"):
            return "Contact Us"
        return self.rng.choice(CTAS)

    def generate(self, prompt: str, content_type: ContentType, context: Mapping[str, str]) -> str:
        content_type = ContentType(content_type)
        if content_type is ContentType.HEADLINE:
            return self.headline(prompt, context)
        if content_type is ContentType.PARAGRAPH:
            return self.paragraph(prompt, context)
        return self.cta(prompt, context)

    def improve(self, content: str, instructions: str) -> str:
        if _has(instructions, "professional"):
            return _replace_words(content, _PROFESSIONAL_WORDS)
        if _has(instructions, "concise", "shorter"):
            if len(content) > 100:
                return ".".join(content.split(".")[:2]) + "."
            return content
        if _has(instructions, "persuasive", "conversion"):
            if "?" in content:
                return content
            if len(content) < 50:
                return content + " Today"
            return content + " Start now and see the difference."
        return _replace_words(content, _ENHANCE_WORDS)

    def suggest_styles(self, category: str, prompt: str) -> Dict[str, str]:
        return {
            "background_color": _background_for(category, prompt),
            "text_color": "#ffffff" if category in ("hero", "cta", "footer") or _has(prompt, "dark")
            else "#111827",
            "font_family": _font_for(prompt),
            "padding": _PADDING.get(category, "3rem 2rem"),
            "border_radius": "0.5rem",
        }


_PADDING = {"hero": "5rem 2rem", "features": "4rem 2rem", "cta": "4rem 2rem"}

_CATEGORY_BACKGROUNDS = {
    "hero": "linear-gradient(135deg, #3b82f6 0%, #8b5cf6 100%)",
    "features": "#ffffff",
    "form": "#f9fafb",
    "cta": "#2563eb",
    "footer": "#111827",
}


def _background_for(category: str, prompt: str) -> str:
    for word, color in (("blue", "#1e40af"), ("green", "#047857"), ("purple", "#7e22ce"),
                        ("dark", "#1f2937"), ("light", "#f3f4f6")):
        if _has(prompt, word):
            return color
    return _CATEGORY_BACKGROUNDS.get(category, "#ffffff")


def _font_for(prompt: str) -> str:
    if _has(prompt, "modern", "clean"):
        return "Inter, system-ui, sans-serif"
    if _has(prompt, "professional", "business"):
        return "Montserrat, Arial, sans-serif"
    if _has(prompt, "creative", "unique"):
        return "Poppins, sans-serif"
    if _has(prompt, "classic", "traditional"):
        return "Georgia, serif"
    return "system-ui, sans-serif"


@dataclass(frozen=True)
class Suggestion:
    prompt: str
    content_type: str
    text: str
    source: str  # "remote" or "fallback"


class AssistTask:
    """A background assistant request that the caller may walk away from.

    ``discard()`` only detaches the caller: the request itself runs to the end
    and its answer is dropped. Callbacks run under the task lock, so once
    ``discard()`` returns no callback fires.
    """

    def __init__(self, future: "Future[str]") -> None:
        self._future = future
        self._lock = RLock()
        self._discarded = False
        self._callbacks: List[Callable[[str], None]] = []
        future.add_done_callback(self._finished)

    @property
    def discarded(self) -> bool:
        return self._discarded

    def done(self) -> bool:
        return self._future.done()

    def discard(self) -> None:
        with self._lock:
            self._discarded = True
            self._callbacks.clear()

    def on_done(self, callback: Callable[[str], None]) -> None:
        with self._lock:
            if self._discarded:
                return
            if not self._future.done():
                self._callbacks.append(callback)
                return
            if self._future.exception() is None:
                callback(self._future.result())

    def result(self, timeout: Optional[float] = None) -> Optional[str]:
        text = self._future.result(timeout=timeout)
        return None if self._discarded else text

    def _finished(self, future: "Future[str]") -> None:
        exc = future.exception()
        if exc is not None:
            log.error("Assistant request failed: %s", exc)
            return
        text = future.result()
        with self._lock:
            callbacks, self._callbacks = self._callbacks, []
            for callback in callbacks:
                if self._discarded:
                    return
                callback(text)


class ContentAssistant:
    """Remote copy generation that never fails the caller."""

    def __init__(
        self,
        service: Optional[ContentService] = None,
        fallback: Optional[FallbackWriter] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.service = service
        self.fallback = fallback or FallbackWriter()
        self._executor = executor
        self.history: List[Suggestion] = []

    def generate(
        self,
        prompt: str,
        content_type: Union[ContentType, str],
        context: Optional[Mapping[str, str]] = None,
    ) -> str:
        content_type = ContentType(content_type)
        context = dict(context or {})
        source = "fallback"
        text = ""
        if self.service is not None:
            try:
                text = self.service.generate(prompt, content_type, context)
                source = "remote"
            except Exception as exc:
                log.warning("Content service failed, using local copy: %s", exc)
        if source == "fallback":
            text = self.fallback.generate(prompt, content_type, context)
        self.history.append(Suggestion(prompt, content_type.value, text, source))
        return text

    def improve(self, content: str, instructions: str) -> str:
        if self.service is not None:
            try:
                return self.service.improve(content, instructions)
            except Exception as exc:
                log.warning("Content service could not improve text, using local rules: %s", exc)
        return self.fallback.improve(content, instructions)

    def suggest_styles(self, category: str, prompt: str) -> Dict[str, str]:
        remote = getattr(self.service, "suggest_styles", None)
        if remote is not None:
            try:
                styles = remote(category, prompt)
                if styles:
                    return {**self.fallback.suggest_styles(category, prompt), **styles}
            except Exception as exc:
                log.warning("Content service could not suggest styles: %s", exc)
        return self.fallback.suggest_styles(category, prompt)

    # background requests ------------------------------------------------
    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="pagesmith-assist")
        return self._executor

    def submit_generate(
        self,
        prompt: str,
        content_type: Union[ContentType, str],
        context: Optional[Mapping[str, str]] = None,
    ) -> AssistTask:
        return AssistTask(self._pool().submit(self.generate, prompt, content_type, context))

    def submit_improve(self, content: str, instructions: str) -> AssistTask:
        return AssistTask(self._pool().submit(self.improve, content, instructions))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def assistant_from_settings(settings) -> ContentAssistant:
    """Build an assistant wired to OpenAI when an API key is configured."""
    key = settings.openai_api_key()
    service = OpenAIContentService(key, model=settings.openai_model()) if key else None
    return ContentAssistant(service)
