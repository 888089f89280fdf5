from prometheus_client import Counter, Gauge

scheduler_ticks_total = Counter(
    "restaurant_scheduler_ticks_total", "Total automatic status ticks executed"
)

scheduler_running = Gauge(
    "restaurant_scheduler_running", "Whether automatic status management is running"
)

scheduler_errors_total = Counter(
    "restaurant_scheduler_errors_total",
    "Restaurants skipped by a tick because of an error",
)

restaurant_status_flips_total = Counter(
    "restaurant_status_flips_total", "Restaurant open/closed flips", ["status"]
)

order_transitions_total = Counter(
    "order_transitions_total", "Order status transitions applied", ["status"]
)

refund_transitions_total = Counter(
    "refund_transitions_total", "Refund status transitions applied", ["status"]
)

rejected_transitions_total = Counter(
    "rejected_transitions_total", "Status transitions rejected", ["entity"]
)

carrier_webhooks_total = Counter(
    "carrier_webhooks_total", "Carrier webhooks received", ["status"]
)

reassignments_total = Counter(
    "delivery_reassignments_total", "Delivery reassignments attempted", ["outcome"]
)
