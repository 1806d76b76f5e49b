"""
Prometheus metrics: order transitions (store), confirmation handshakes, chat delivery, relay health.
"""
from prometheus_client import Counter, generate_latest

# Store: committed and refused status changes
order_status_transitions_total = Counter(
    "order_status_transitions_total",
    "Total committed order status transitions",
    ["from_status", "to_status"],
)
order_transitions_rejected_total = Counter(
    "order_transitions_rejected_total",
    "Total status changes refused by the transition table",
    ["current_status", "attempted_status"],
)

# Confirmation protocol outcomes (initiated / accepted / rejected / withdrawn)
confirmation_handshakes_total = Counter(
    "confirmation_handshakes_total",
    "Total meetup confirmation handshake steps",
    ["outcome"],
)

# Simulated chat transport
chat_messages_sent_total = Counter(
    "chat_messages_sent_total",
    "Total chat messages delivered by the simulated transport",
)
chat_messages_failed_total = Counter(
    "chat_messages_failed_total",
    "Total chat delivery attempts that failed (retryable or permanent)",
)
chat_messages_permanently_failed_total = Counter(
    "chat_messages_permanently_failed_total",
    "Total chat messages marked permanently failed after max retries",
)

relay_subscriber_errors_total = Counter(
    "relay_subscriber_errors_total",
    "Total exceptions raised by status-change subscribers",
)


def get_metrics_content_type():
    return "text/plain; charset=utf-8; version=0.0.4"


def get_metrics_bytes():
    return generate_latest()
