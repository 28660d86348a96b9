"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"devconnect_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"devconnect_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"devconnect_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_EVENTS = Counter(
	"devconnect_socketio_events_total",
	"Socket.IO events emitted or received per namespace",
	["namespace", "event"],
)

SOCKET_EMIT_FAILURES = Counter(
	"devconnect_socketio_emit_failures_total",
	"Best-effort Socket.IO emits that raised",
	["event"],
)

PRESENCE_ONLINE = Gauge(
	"devconnect_presence_online_users",
	"Users holding a live Socket.IO handle in this process",
)

CONNECTION_REQUESTS = Counter(
	"devconnect_connection_requests_total",
	"Connection requests by outcome",
	["result"],
)

CONNECTION_ACCEPTS = Counter(
	"devconnect_connection_accepts_total",
	"Connection requests accepted",
)

CONNECTION_REJECTS = Counter(
	"devconnect_connection_rejects_total",
	"Connection requests rejected",
)

CONNECTION_REMOVALS = Counter(
	"devconnect_connection_removals_total",
	"Connections removed",
)

CONNECTION_PARTIAL_WRITES = Counter(
	"devconnect_connection_partial_writes_total",
	"Second half of a two-document update that failed",
	["operation"],
)

SUGGESTIONS_SERVED = Counter(
	"devconnect_suggestions_served_total",
	"Suggestion lists computed",
)

SEARCH_QUERIES = Counter(
	"devconnect_search_queries_total",
	"Connection search queries",
)

CHAT_SEND = Counter(
	"devconnect_chat_send_total",
	"Chat messages sent",
)

CHAT_READ = Counter(
	"devconnect_chat_read_total",
	"Chat messages marked as read",
)

AUDIT_WRITE_FAILURES = Counter(
	"devconnect_audit_write_failures_total",
	"Audit stream appends that failed",
)

STORE_ERRORS = Counter(
	"devconnect_store_errors_total",
	"Persistence failures surfaced as unavailable",
	["store"],
)

IDENTITY_REGISTER = Counter(
	"devconnect_identity_register_total",
	"Successful user registrations",
)

REDIS_UP = Gauge("devconnect_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("devconnect_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("devconnect_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("devconnect_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def socket_emit_failure(event: str) -> None:
	SOCKET_EMIT_FAILURES.labels(event=event).inc()


def presence_online(count: int) -> None:
	PRESENCE_ONLINE.set(count)


def inc_connection_request(result: str) -> None:
	CONNECTION_REQUESTS.labels(result=result).inc()


def inc_connection_accept() -> None:
	CONNECTION_ACCEPTS.inc()


def inc_connection_reject() -> None:
	CONNECTION_REJECTS.inc()


def inc_connection_remove() -> None:
	CONNECTION_REMOVALS.inc()


def inc_partial_write(operation: str) -> None:
	CONNECTION_PARTIAL_WRITES.labels(operation=operation).inc()


def inc_suggestions() -> None:
	SUGGESTIONS_SERVED.inc()


def inc_search_query() -> None:
	SEARCH_QUERIES.inc()


def inc_chat_send() -> None:
	CHAT_SEND.inc()


def inc_chat_read(count: int = 1) -> None:
	if count > 0:
		CHAT_READ.inc(count)


def inc_audit_failure() -> None:
	AUDIT_WRITE_FAILURES.inc()


def inc_store_error(store: str) -> None:
	STORE_ERRORS.labels(store=store).inc()


def inc_identity_register() -> None:
	IDENTITY_REGISTER.inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
