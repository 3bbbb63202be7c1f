"""
Core metrics collection for the storefront using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.config import settings
from core.logging import get_logger

# Create a global registry for the application
REGISTRY = CollectorRegistry()

app_info = Info("storefront_app", "Storefront application information", registry=REGISTRY)

# Request metrics
request_count = Counter(
    "storefront_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "storefront_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Order lifecycle metrics
orders_created = Counter(
    "storefront_orders_created_total",
    "Total number of pending orders created at checkout",
    ["currency"],
    registry=REGISTRY,
)

orders_confirmed = Counter(
    "storefront_orders_confirmed_total",
    "Total number of orders transitioned to Confirmed",
    registry=REGISTRY,
)

webhook_events = Counter(
    "storefront_webhook_events_total",
    "Webhook deliveries by event type and outcome",
    ["event_type", "outcome"],
    registry=REGISTRY,
)

webhook_rejections = Counter(
    "storefront_webhook_rejections_total",
    "Webhook deliveries rejected before dispatch",
    ["reason"],
    registry=REGISTRY,
)

# Notification metrics
emails_sent = Counter(
    "storefront_emails_sent_total",
    "Total number of notification emails attempted",
    ["template", "status"],
    registry=REGISTRY,
)

email_config_loads = Counter(
    "storefront_email_config_loads_total",
    "Email configuration initialisations by source",
    ["source"],
    registry=REGISTRY,
)

# Error metrics
error_count = Counter(
    "storefront_errors_total",
    "Total number of errors",
    ["error_type", "domain"],
    registry=REGISTRY,
)


class MetricsCollector:
    """Helper class for collecting metrics"""

    def __init__(self):
        self.logger = get_logger("metrics")
        app_info.info({"version": settings.app_version, "environment": settings.environment})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        """Track HTTP request metrics"""
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_order_created(self, currency: str):
        orders_created.labels(currency=currency).inc()

    def track_order_confirmed(self):
        orders_confirmed.inc()

    def track_webhook_event(self, event_type: str, outcome: str):
        """Track a verified webhook delivery"""
        webhook_events.labels(event_type=event_type, outcome=outcome).inc()

    def track_webhook_rejection(self, reason: str):
        """Track a webhook rejected at the config or signature gate"""
        webhook_rejections.labels(reason=reason).inc()

    def track_email_sent(self, template: str, status: str = "success"):
        emails_sent.labels(template=template, status=status).inc()

    def track_email_config_load(self, source: str):
        email_config_loads.labels(source=source).inc()

    def track_error(self, error_type: str, domain: str):
        """Track errors"""
        error_count.labels(error_type=error_type, domain=domain).inc()

    def get_metrics(self) -> bytes:
        """Get current metrics in Prometheus format"""
        return generate_latest(REGISTRY)


# Global metrics collector instance
metrics = MetricsCollector()


def get_metrics_response() -> tuple[bytes, str]:
    """Get metrics response for Prometheus endpoint"""
    return metrics.get_metrics(), CONTENT_TYPE_LATEST
