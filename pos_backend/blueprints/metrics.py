"""
Prometheus metrics for the POS API.

Request counters and latency are collected by hooks on the app; ledger
operations report their Outcome through record_outcome(). Scraped at /metrics.
"""
import os
import time

from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY

metrics_bp = Blueprint('metrics', __name__)

# gunicorn workers share samples through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = registry

http_requests_total = Counter(
    'http_requests_total',
    'API requests by method, endpoint and status',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'API request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'API requests being served',
    registry=_metric_registry
)

# operation: sale, receipt, quotation_*, product_*
# outcome: ok or an ErrorKind value
pos_transactions_total = Counter(
    'pos_transactions_total',
    'Ledger transactions by operation and outcome',
    ['operation', 'outcome'],
    registry=_metric_registry
)


def record_outcome(operation, outcome):
    """Count a finished orchestration."""
    label = 'ok' if outcome.ok else outcome.kind.value
    pos_transactions_total.labels(operation=operation, outcome=label).inc()


def setup_metrics_instrumentation(app):
    """Time and count every request served by app."""

    @app.before_request
    def start_request_timer():
        g._request_started_at = time.time()
        http_requests_in_flight.inc()

    @app.after_request
    def observe_request(response):
        started_at = g.pop('_request_started_at', None)
        if started_at is None:
            return response
        try:
            endpoint = request.endpoint or 'unknown'
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.time() - started_at)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=response.status_code
            ).inc()
            http_requests_in_flight.dec()
        except Exception as e:
            app.logger.warning(f"No se pudieron registrar métricas: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus exposition. Unauthenticated; keep it off the public network."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
