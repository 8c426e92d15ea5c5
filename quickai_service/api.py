"""
FastAPI layer for the Quick.ai backend.

Endpoints (all under /api):
 - GET  /health
 - POST /remove-background
 - POST /blog-titles
 - POST /write-article
 - POST /review-resume
 - POST /generate-image
 - POST /remove-object
 - GET  /community/demo-posts
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import requests

from . import config, content
from .llm import CompletionClient
from .pipeline import remove_background as run_background_removal
from .remover import BackgroundRemover, RembgRemover

logger = logging.getLogger(__name__)

REMOVE_BG_SUCCESS = "Background removed successfully"
REMOVE_BG_FAILURE = (
    "Failed to remove background. Ensure the image is valid and check server logs for details."
)
REMOVE_BG_MISSING = "Image URL (or data:) is required"

router = APIRouter()


class RemoveBackgroundRequest(BaseModel):
    # Left untyped so non-string values reach the resolver and fail there.
    imageUrl: Any = None


class RemoveBackgroundResponse(BaseModel):
    message: str
    resultUrl: str


class BlogTitlesRequest(BaseModel):
    keyword: Optional[str] = None
    category: Optional[str] = None
    tone: Optional[str] = None
    count: Any = None


class WriteArticleRequest(BaseModel):
    topic: Optional[str] = None
    tone: Optional[str] = None
    length: Optional[str] = None
    includeOutline: Optional[bool] = None


class ReviewResumeRequest(BaseModel):
    role: Optional[str] = None
    resumeText: Any = None


class GenerateImageRequest(BaseModel):
    prompt: Optional[str] = None
    style: Optional[str] = None
    aspectRatio: Optional[str] = None
    count: Any = None


def _message(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def get_settings_dep(request: Request) -> config.Settings:
    return request.app.state.settings


def get_remover(request: Request) -> BackgroundRemover:
    return request.app.state.remover


def get_http_session(request: Request) -> requests.Session:
    return request.app.state.http_session


def get_completions(request: Request) -> CompletionClient:
    return request.app.state.completions


@router.get("/health")
def health():
    return {"status": "ok", "message": "Quick.ai backend is running"}


@router.post("/remove-background", response_model=RemoveBackgroundResponse)
async def remove_background(
    body: Optional[RemoveBackgroundRequest] = None,
    settings: config.Settings = Depends(get_settings_dep),
    remover: BackgroundRemover = Depends(get_remover),
    session: requests.Session = Depends(get_http_session),
):
    image_url = body.imageUrl if body else None
    # Empty containers are not "missing"; they fail later as non-strings.
    if image_url is None or image_url in ("", 0):
        return _message(400, REMOVE_BG_MISSING)

    logger.info("Processing background removal...")
    try:
        result_url = await run_background_removal(
            image_url,
            remover,
            session,
            temp_prefix=settings.temp_dir_prefix,
            fetch_timeout=settings.image_fetch_timeout_seconds,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Background removal error: %s", exc)
        return _message(500, REMOVE_BG_FAILURE, error=str(exc) or type(exc).__name__)

    return RemoveBackgroundResponse(message=REMOVE_BG_SUCCESS, resultUrl=result_url)


@router.post("/blog-titles")
async def blog_titles(
    body: Optional[BlogTitlesRequest] = None,
    completions: CompletionClient = Depends(get_completions),
):
    body = body or BlogTitlesRequest()
    if not body.keyword or not body.keyword.strip():
        return _message(400, "Keyword is required")

    options = content.BlogTitleOptions.build(body.keyword, body.category, body.tone, body.count)
    try:
        raw = await completions.acomplete(content.blog_title_messages(options), temperature=0.8)
        titles = content.parse_titles(raw or "[]", options.count)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Blog titles error: %s", exc)
        return _message(500, "Failed to generate titles from AI.")

    return {"titles": titles, "meta": options.meta}


@router.post("/write-article")
async def write_article(
    body: Optional[WriteArticleRequest] = None,
    completions: CompletionClient = Depends(get_completions),
):
    body = body or WriteArticleRequest()
    if not body.topic or not body.topic.strip():
        return _message(400, "Topic is required.")

    options = content.ArticleOptions.build(body.topic, body.tone, body.length, body.includeOutline)
    try:
        article = await completions.acomplete(content.article_messages(options), temperature=0.8)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Write article error: %s", exc)
        return _message(500, "Failed to generate article.")

    return {"article": article or content.ARTICLE_FALLBACK_TEXT, "meta": options.meta}


@router.post("/review-resume")
async def review_resume(
    body: Optional[ReviewResumeRequest] = None,
    completions: CompletionClient = Depends(get_completions),
):
    body = body or ReviewResumeRequest()
    if not body.resumeText or not isinstance(body.resumeText, str):
        return _message(400, "resumeText is required.")

    options = content.ResumeReviewOptions(resume_text=body.resumeText, role=body.role)
    try:
        raw = await completions.acomplete(content.resume_review_messages(options), temperature=0.4)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Resume review error: %s", exc)
        return _message(500, "Failed to review resume.")

    return content.parse_review(raw or "{}", options.role)


@router.post("/generate-image")
def generate_image(body: Optional[GenerateImageRequest] = None):
    body = body or GenerateImageRequest()
    if not body.prompt or not body.prompt.strip():
        return _message(400, "Prompt is required")

    options = content.ImageGenerationOptions.build(body.prompt, body.style, body.aspectRatio, body.count)
    return {"images": content.build_image_urls(options)}


@router.post("/remove-object")
def remove_object() -> Dict[str, str]:
    return dict(content.OBJECT_REMOVAL_PLACEHOLDER)


@router.get("/community/demo-posts")
def community_demo_posts() -> Dict[str, List[Dict[str, Any]]]:
    return {"posts": content.demo_posts()}


def create_app(
    settings: Optional[config.Settings] = None,
    remover: Optional[BackgroundRemover] = None,
    completions: Optional[CompletionClient] = None,
    http_session: Optional[requests.Session] = None,
) -> FastAPI:
    """
    Build the application with its collaborators.

    Anything not passed in is created from ``settings``; sessions created here
    are closed on shutdown.
    """
    settings = settings or config.get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    owned: List[Any] = []
    if http_session is None:
        http_session = requests.Session()
        owned.append(http_session)
    if completions is None:
        completions = CompletionClient.from_settings(settings)
        owned.append(completions)
    if remover is None:
        remover = RembgRemover(settings.rembg_model)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for resource in owned:
            resource.close()

    app = FastAPI(title="Quick.ai Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.remover = remover
    app.state.completions = completions
    app.state.http_session = http_session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")
    return app
