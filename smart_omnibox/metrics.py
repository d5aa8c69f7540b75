from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response
from fastapi.responses import JSONResponse

from .config import settings

# Suggestion service metrics
suggestion_requests_total = Counter('suggestion_requests_total', 'Total smart suggestion requests', ['status'])
suggestion_duration_seconds = Histogram('suggestion_duration_seconds', 'Smart suggestion generation duration')
suggestions_returned = Histogram(
    'suggestions_returned', 'Suggestions returned per request', buckets=(0, 1, 2, 3, 4, 5, 6, 7, 8)
)
intent_types_detected = Counter('intent_types_detected_total', 'Intent types detected', ['intent_type'])
suggestion_fallbacks_total = Counter('suggestion_fallbacks_total', 'Requests answered with default suggestions')
chat_requests_total = Counter('chat_requests_total', 'Chat completion requests', ['status'])


def record_suggestion_request(status: str, duration: float, count: Optional[int] = None, intent_type: Optional[str] = None):
    """Record suggestion request metrics"""
    suggestion_requests_total.labels(status=status).inc()
    suggestion_duration_seconds.observe(duration)
    if count is not None:
        suggestions_returned.observe(count)
    if intent_type:
        intent_types_detected.labels(intent_type=intent_type).inc()


async def metrics_endpoint():
    """Prometheus metrics endpoint"""
    if not settings.metrics_enabled:
        return JSONResponse(status_code=404, content={"error": "Metrics are disabled"})
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
