"""
Métriques Prometheus pour l'application.

Ce module définit les métriques Prometheus de l'historique des versions (créations, contention
transactionnelle, rétention, restaurations) ainsi que les métriques HTTP génériques.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Versions
VERSIONS_CREATED = Counter(
    "pitch_versions_created_total",
    "Versions de pitch créées",
    ["type"],
)
VERSION_TXN_RETRIES = Counter(
    "pitch_version_txn_retries_total",
    "Retries de la transaction d'allocation de numéro de version",
)
VERSION_TXN_EXHAUSTED = Counter(
    "pitch_version_txn_exhausted_total",
    "Allocations abandonnées après épuisement des retries",
)

# Rétention
VERSIONS_PRUNED = Counter(
    "pitch_versions_pruned_total",
    "Versions supprimées par la rétention",
)
RETENTION_FAILURES = Counter(
    "pitch_retention_failures_total",
    "Échecs de rétention (jamais propagés au chemin d'écriture)",
    ["stage"],
)

# Restauration
RESTORES_TOTAL = Counter(
    "pitch_restores_total",
    "Restaurations de pitch par issue",
    ["result"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = request.scope.get("route")
        route_label = getattr(route, "path", None) or "unmatched"
        REQUEST_COUNT.labels(request.method, route_label, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route_label).observe(time.perf_counter() - start)
        return response
