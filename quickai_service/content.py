"""
Text and image content helpers behind the content routes.

Each route gets an options dataclass holding its documented defaults, a prompt
builder, and (where the model answers in JSON) a tolerant parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import math
import random
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .llm import Message

TITLE_COUNT_DEFAULT = 5
TITLE_COUNT_MIN = 3
TITLE_COUNT_MAX = 10

IMAGE_COUNT_FALLBACK = 1
IMAGE_COUNT_MIN = 1
IMAGE_COUNT_MAX = 4

ARTICLE_TARGET_WORDS = {"Short": 500, "Long": 1500}
ARTICLE_TARGET_WORDS_DEFAULT = 800
ARTICLE_FALLBACK_TEXT = "Sorry, I couldn't generate an article."

POLLINATIONS_URL = "https://image.pollinations.ai/prompt/"
# encodeURIComponent leaves these unescaped; keep URLs identical to the web client.
URI_COMPONENT_SAFE = "-_.!~*'()"

OBJECT_REMOVAL_PLACEHOLDER = {
    "message": "To remove objects, the frontend needs a 'masking' tool. This is a placeholder.",
    "resultUrl": "https://via.placeholder.com/512x512.png?text=Object+Removal+Requires+Mask",
}

_NUMBERED_LINE = re.compile(r"^\d+\.\s*")
_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def coerce_count(value: Any, default: int, low: int, high: int) -> int:
    """Read ``value`` as a number; missing, non-numeric or zero means ``default``. Then clamp."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = 0.0
    if math.isnan(number) or not number:
        number = default
    return int(min(max(number, low), high))


def _strip_code_fence(raw: str) -> str:
    return _CODE_FENCE.sub("", raw.strip())


def _loads(raw: str) -> Any:
    try:
        return json.loads(_strip_code_fence(raw))
    except ValueError:
        return None


# ------------------ BLOG TITLES ------------------


@dataclass
class BlogTitleOptions:
    keyword: str
    category: str = "General"
    tone: str = "Neutral"
    count: int = TITLE_COUNT_DEFAULT

    @classmethod
    def build(
        cls,
        keyword: str,
        category: Optional[str] = None,
        tone: Optional[str] = None,
        count: Any = None,
    ) -> "BlogTitleOptions":
        return cls(
            keyword=keyword.strip(),
            category=cls.category if category is None else category,
            tone=cls.tone if tone is None else tone,
            count=coerce_count(count, TITLE_COUNT_DEFAULT, TITLE_COUNT_MIN, TITLE_COUNT_MAX),
        )

    @property
    def meta(self) -> Dict[str, Any]:
        return {"category": self.category, "tone": self.tone, "count": self.count}


def blog_title_messages(options: BlogTitleOptions) -> List[Message]:
    prompt = (
        "You are a content marketing assistant.\n"
        f"Generate {options.count} catchy blog post titles as a JSON array of strings.\n"
        f'Topic: "{options.keyword}"\n'
        f"Category: {options.category}\n"
        f"Tone: {options.tone}\n\n"
        "Return ONLY valid JSON array, nothing else. Do not add markdown.\n"
    )
    return [{"role": "user", "content": prompt}]


def parse_titles(raw: str, count: int) -> List[str]:
    """Parse a JSON array of titles, falling back to one title per line."""
    parsed = _loads(raw)
    if isinstance(parsed, list):
        titles = [str(t).strip() for t in parsed]
    else:
        titles = [_NUMBERED_LINE.sub("", line).strip() for line in raw.split("\n")]
    return [t for t in titles if t][:count]


# ------------------ ARTICLES ------------------


@dataclass
class ArticleOptions:
    topic: str
    tone: str = "Neutral"
    length: str = "Medium"
    # Accepted for API compatibility; the prompt always asks for headings.
    include_outline: bool = True

    @classmethod
    def build(
        cls,
        topic: str,
        tone: Optional[str] = None,
        length: Optional[str] = None,
        include_outline: Optional[bool] = None,
    ) -> "ArticleOptions":
        return cls(
            topic=topic.strip(),
            tone=cls.tone if tone is None else tone,
            length=cls.length if length is None else length,
            include_outline=cls.include_outline if include_outline is None else include_outline,
        )

    @property
    def target_words(self) -> int:
        return ARTICLE_TARGET_WORDS.get(self.length, ARTICLE_TARGET_WORDS_DEFAULT)

    @property
    def meta(self) -> Dict[str, Any]:
        return {"tone": self.tone, "length": self.length, "targetWords": self.target_words}


def article_messages(options: ArticleOptions) -> List[Message]:
    system_prompt = (
        "You are an article-writing assistant.\n"
        "Write a structured article in Markdown about the given topic.\n"
        f"Tone: {options.tone}\n"
        f"Target length: about {options.target_words} words.\n"
        "Include headings and bullet points. Write in clear English.\n"
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": f"Topic: {options.topic}"},
    ]


# ------------------ RESUME REVIEW ------------------

RESUME_SYSTEM_PROMPT = (
    "You are a resume reviewer for tech roles.\n"
    "Given a resume and a target role, return feedback as JSON with keys:\n"
    "- score (0-100)\n"
    "- summary (1-3 sentences)\n"
    "- strengths (array of strings)\n"
    "- improvements (array of strings)\n"
    "Return ONLY valid JSON.\n"
)
REVIEW_SOURCE = "groq-llama"


@dataclass
class ResumeReviewOptions:
    resume_text: str
    role: Optional[str] = None


def resume_review_messages(options: ResumeReviewOptions) -> List[Message]:
    user = f"Target role: {options.role or 'Not specified'}\n\nResume:\n{options.resume_text.strip()}"
    return [
        {"role": "system", "content": RESUME_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def parse_review(raw: str, role: Optional[str]) -> Dict[str, Any]:
    parsed = _loads(raw)
    feedback = parsed if isinstance(parsed, dict) else {}

    def pick(key: str, default: Any) -> Any:
        value = feedback.get(key)
        return default if value is None else value

    return {
        "role": role,
        "score": pick("score", 70),
        "summary": pick("summary", "Review completed."),
        "strengths": pick("strengths", []),
        "improvements": pick("improvements", []),
        "from": REVIEW_SOURCE,
    }


# ------------------ IMAGE GENERATION ------------------


@dataclass
class ImageGenerationOptions:
    prompt: str
    style: str = "Default"
    aspect_ratio: str = "Square (1:1)"
    count: int = 4

    @classmethod
    def build(
        cls,
        prompt: str,
        style: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
        count: Any = None,
    ) -> "ImageGenerationOptions":
        return cls(
            prompt=prompt.strip(),
            style=cls.style if style is None else style,
            aspect_ratio=cls.aspect_ratio if aspect_ratio is None else aspect_ratio,
            count=coerce_count(
                cls.count if count is None else count,
                IMAGE_COUNT_FALLBACK,
                IMAGE_COUNT_MIN,
                IMAGE_COUNT_MAX,
            ),
        )

    @property
    def size(self) -> tuple[int, int]:
        if "16:9" in self.aspect_ratio:
            return 1280, 720
        if "9:16" in self.aspect_ratio:
            return 720, 1280
        if "4:3" in self.aspect_ratio:
            return 1024, 768
        return 1024, 1024

    @property
    def enhanced_prompt(self) -> str:
        if self.style != "Default":
            return f"{self.prompt}, {self.style} style"
        return self.prompt


def build_image_urls(options: ImageGenerationOptions, rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """Build Pollinations image URLs; nothing is fetched here."""
    rng = rng or random.Random()
    width, height = options.size
    encoded = quote(options.enhanced_prompt, safe=URI_COMPONENT_SAFE)
    images = []
    for i in range(options.count):
        seed = rng.randrange(1_000_000)
        url = (
            f"{POLLINATIONS_URL}{encoded}"
            f"?width={width}&height={height}&seed={seed}&model=flux&nologo=true"
        )
        images.append(
            {
                "id": i + 1,
                "url": url,
                "prompt": options.prompt,
                "style": options.style,
                "aspectRatio": options.aspect_ratio,
            }
        )
    return images


# ------------------ COMMUNITY ------------------


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def demo_posts() -> List[Dict[str, Any]]:
    """Static sample posts; there is no persistence behind the community page."""
    created_at = _utc_now_iso()
    return [
        {
            "id": 1,
            "author": "Demo User",
            "content": "Just generated amazing blog titles!",
            "tool": "Blog Generator",
            "likes": 5,
            "createdAt": created_at,
        },
        {
            "id": 2,
            "author": "Creator",
            "content": "Background removal is super fast.",
            "tool": "BG Remover",
            "likes": 8,
            "createdAt": created_at,
        },
    ]
