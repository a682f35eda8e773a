from prometheus_client import Counter, Histogram


# Cart Metrics
cart_mutations_total = Counter(
    "marketplace_cart_mutations_total", "Cart mutations by operation and outcome", ["operation", "status"]
)
cart_merge_conflicts_total = Counter(
    "marketplace_cart_merge_conflicts_total", "Cart merges that lost a concurrent update and were retried"
)

# Stock Metrics
stock_guard_rejections_total = Counter(
    "marketplace_stock_guard_rejections_total", "Quantity requests rejected for exceeding stock", ["merged"]
)

# Rating Metrics
rating_recalculations_total = Counter(
    "marketplace_rating_recalculations_total", "Product rating recalculations", ["status"]
)

# Promotion Metrics
promo_lookups_total = Counter("marketplace_promo_lookups_total", "Promotion code lookups", ["result"])

# Store Metrics
store_errors_total = Counter("marketplace_store_errors_total", "Store failures by SQLSTATE code", ["code"])

# Performance Metrics
cart_projection_duration = Histogram("marketplace_cart_projection_seconds", "Cart projection time")
