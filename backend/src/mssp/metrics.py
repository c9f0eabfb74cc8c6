"""Domain metrics for Prometheus monitoring."""
from prometheus_client import Counter

# Relationship metrics
relationship_queries_total = Counter(
    "relationship_queries_total",
    "Total relationship lookups served",
    labelnames=["operation"],  # relationships, stats, related
)

entity_search_total = Counter(
    "entity_search_total",
    "Total cross-entity search requests",
)

# Audit trail metrics
audit_entries_written_total = Counter(
    "audit_entries_written_total",
    "Total audit trail rows written",
    labelnames=["table"],  # audit_logs, change_history, security_events, data_access_logs, system_events
)

audit_write_failures_total = Counter(
    "audit_write_failures_total",
    "Total audit trail writes that failed and were dropped",
    labelnames=["table"],
)

# Client metrics
clients_created_total = Counter(
    "clients_created_total",
    "Total clients created",
)

clients_archived_total = Counter(
    "clients_archived_total",
    "Total clients archived",
)
