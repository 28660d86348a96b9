"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, connections, messages, ops, users
from app.api.errors import install_error_handlers
from app.api.middleware_request_id import RequestIdMiddleware
from app.domain import container
from app.domain.presence.sockets import RealtimeNamespace
from app.infra import postgres
from app.infra.identity_repo import PostgresIdentityStore
from app.infra.message_repo import PostgresMessageStore
from app.infra.schema import ensure_schema
from app.obs import init as obs_init
from app.settings import settings

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:5173",
	"http://127.0.0.1:5173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	if settings.uses_postgres():
		pool = await postgres.init_pool()
		await ensure_schema(pool)
		container.configure(
			identity_store=PostgresIdentityStore(pool),
			message_store=PostgresMessageStore(pool),
		)
		logger.info("postgres store backend active")
	try:
		yield
	finally:
		container.get_presence().clear()
		await postgres.close_pool()


app = FastAPI(title="DevConnect API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = list(DEV_ORIGINS) if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True. Replace '*' with explicit origins.
if "*" in allow_origins:
	allow_origins = list(DEV_ORIGINS) if settings.is_dev() else [origin for origin in allow_origins if origin != "*"]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Use the same allowed origins for Socket.IO as for the REST API
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=allow_origins)
realtime_namespace = RealtimeNamespace()
sio.register_namespace(realtime_namespace)
container.get_presence().bind(realtime_namespace)
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
obs_init(app)

# Ensure every request carries an X-Request-Id and make it available on request.state
app.add_middleware(RequestIdMiddleware)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(connections.router)
app.include_router(messages.router)
app.include_router(ops.router)
