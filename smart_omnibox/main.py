"""
Smart Omnibox Service
Turns free-text omnibox input into navigation, search, saved links or AI answers
"""

from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from . import __version__
from .config import settings
from .context_analyzer import ContextAnalyzer
from .exceptions import ChatBackendError, InputValidationError, OmniboxError
from .intent_classifier import IntentClassifier
from .llm_client import DeepSeekClient
from .metrics import chat_requests_total, metrics_endpoint, record_suggestion_request
from .models import (
    AnalyzePageRequest, AskRequest, AskResponse, ErrorResponse, OmniboxRequest,
    OmniboxResponse, PageContext, SavedLink, SmartSuggestionsRequest,
    SmartSuggestionsResponse,
)
from .omnibox import handle_omnibox_input, resolve_target
from .store import QueryStore, RedisQueryStore
from .suggestion_service import SuggestionService
from .user_model import record_page_visit, record_query_history
from .utils.logging import setup_logging
from .utils.redis_pool import RedisPool

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("🚀 Starting Smart Omnibox Service")
    
    app.state.redis_pool = RedisPool()
    try:
        await app.state.redis_pool.initialize(settings.redis_url)
        app.state.store = RedisQueryStore(app.state.redis_pool.get_client())
        logger.info("✅ Redis store ready")
    except Exception as e:
        # Serve default profiles without history rather than refusing to start
        logger.error("Redis unavailable, running without a store", error=str(e))
        app.state.store = None
    
    app.state.chat_client = DeepSeekClient()
    
    yield
    
    logger.info("🛑 Shutting down Smart Omnibox Service")
    await app.state.redis_pool.close()


app = FastAPI(
    title="Smart Omnibox Service",
    description="Intent classification and ranked suggestions for omnibox input",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OmniboxError)
async def omnibox_error_handler(request: Request, exc: OmniboxError):
    """Render service errors as {"error": ...}"""
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies keep the {"error": ...} shape"""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"error": f"{location}: {message}" if location else message}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def get_store(request: Request) -> Optional[QueryStore]:
    """Injected storage dependency"""
    return getattr(request.app.state, "store", None)


def get_suggestion_service(store: Optional[QueryStore] = Depends(get_store)) -> SuggestionService:
    return SuggestionService(store=store)


def get_chat_client(request: Request) -> DeepSeekClient:
    client = getattr(request.app.state, "chat_client", None)
    return client or DeepSeekClient()


@app.post(
    "/smart-suggestions",
    response_model=SmartSuggestionsResponse,
    responses={400: {"model": ErrorResponse}}
)
async def smart_suggestions(
    request: SmartSuggestionsRequest,
    background_tasks: BackgroundTasks,
    service: SuggestionService = Depends(get_suggestion_service)
):
    """Classify the input and return ranked suggestions"""
    try:
        response = await service.handle(request)
    except InputValidationError:
        record_suggestion_request("rejected", 0.0)
        raise
    
    if request.user_id:
        background_tasks.add_task(record_query_history, service.store, response.query, request.user_id)
    
    return response


@app.post("/analyze-page", response_model=PageContext)
async def analyze_page(
    request: AnalyzePageRequest,
    background_tasks: BackgroundTasks,
    store: Optional[QueryStore] = Depends(get_store)
):
    """Extract a page context from a DOM snapshot and remember the visit"""
    context = ContextAnalyzer().analyze_page(request.html, url=request.url, title=request.title)
    if request.html is not None:
        background_tasks.add_task(record_page_visit, store, context)
    return context


@app.post("/ask", response_model=AskResponse, responses={400: {"model": ErrorResponse}})
async def ask(request: AskRequest, chat_client: DeepSeekClient = Depends(get_chat_client)):
    """Answer a chat conversation"""
    if not request.messages:
        raise InputValidationError("Missing messages")
    
    try:
        result = await chat_client.chat(
            [m.model_dump() for m in request.messages],
            attachments=request.attachments
        )
    except ChatBackendError:
        chat_requests_total.labels(status="error").inc()
        raise
    
    chat_requests_total.labels(status="success").inc()
    return AskResponse(**result)


@app.get("/ask", response_model=AskResponse, responses={400: {"model": ErrorResponse}})
async def ask_question(q: str = "", chat_client: DeepSeekClient = Depends(get_chat_client)):
    """Single-question answer, target of non-URL omnibox submissions"""
    q = q.strip()
    if not q:
        raise InputValidationError("Missing question")
    
    try:
        result = await chat_client.ask(q)
    except ChatBackendError:
        chat_requests_total.labels(status="error").inc()
        raise
    
    chat_requests_total.labels(status="success").inc()
    return AskResponse(**result)


@app.post("/omnibox", response_model=OmniboxResponse, responses={400: {"model": ErrorResponse}})
async def omnibox(request: OmniboxRequest, store: Optional[QueryStore] = Depends(get_store)):
    """Resolve a plain omnibox submission"""
    return await handle_omnibox_input(request.input, store)


@app.get("/omnibox")
async def omnibox_redirect(q: str = ""):
    """Form-submit entry point, redirects to the resolved target"""
    q = q.strip()
    if not q:
        return RedirectResponse("/", status_code=302)
    return RedirectResponse(resolve_target(q), status_code=302)


@app.get("/links", response_model=List[SavedLink])
async def list_links(store: Optional[QueryStore] = Depends(get_store)):
    """Saved links, newest first"""
    if store is None:
        return []
    return await store.list_links()


@app.get("/intents")
async def get_supported_intents():
    """Intent rules in precedence order"""
    return {"intents": IntentClassifier().get_supported_intents()}


@app.get("/health")
async def health_check(store: Optional[QueryStore] = Depends(get_store)):
    """Health check endpoint"""
    store_ok = await store.ping() if store is not None else False
    return {
        "status": "healthy",
        "service": "smart-omnibox",
        "version": __version__,
        "store": "healthy" if store_ok else "unavailable"
    }


app.add_api_route("/metrics", metrics_endpoint, methods=["GET"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
