"""
FastAPI application for the rhyzome graph store.

Routes are plain `def` functions, so Starlette runs each request on its
worker thread pool. The store and the token registry are shared by every
request and reached through dependencies, never module globals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from rhyzome.config import get_settings, Settings
from rhyzome.core.models import Relation
from rhyzome.core.utils import generate_id
from rhyzome.storage import (
    open_store,
    Collections,
    GraphStore,
    StoreError,
)
from rhyzome.storage.base import DEFAULT_TRAVERSAL_RELATION
from rhyzome.auth import (
    AuthorizationGate,
    Permission,
    TokenRegistry,
    enforce,
    get_bearer_token,
    get_gate,
    tokens_router,
)
from rhyzome.integrations.sentry import init_sentry, capture_exception

logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateMicroblogRequest(BaseModel):
    text: str


class CreateRelationRequest(BaseModel):
    related_id: str = Field(min_length=1)


class MicroblogResponse(BaseModel):
    id: str
    text: str


class MicroblogListResponse(BaseModel):
    microblogs: list[MicroblogResponse]
    count: int


class AllTextsResponse(BaseModel):
    texts: list[str]
    count: int


class RelationListResponse(BaseModel):
    id: str
    relations: list[Relation]
    count: int


class RelatedIdsResponse(BaseModel):
    id: str
    relation: str
    related_ids: list[str]


class TraversalResponse(BaseModel):
    start_id: str
    relation: str
    order: str
    visited: list[str]


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Dependencies
# =============================================================================


def get_store(request: Request) -> GraphStore:
    return request.app.state.store


# =============================================================================
# Routes
# =============================================================================


def register_routes(app: FastAPI) -> None:
    """Attach health, microblog and relation routes to `app`."""

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "rhyzome"}

    # =========================================================================
    # Microblogs
    # =========================================================================

    @app.get("/microblogs", response_model=MicroblogListResponse)
    def list_microblogs(store: GraphStore = Depends(get_store)):
        """
        List every microblog in the collection.

        Entries whose node has been deleted are skipped.
        """
        microblogs = []
        for relation in store.query_relations_from(Collections.MICROBLOG):
            text = store.get_node(relation.to_id)
            if text is not None:
                microblogs.append(MicroblogResponse(id=relation.to_id, text=text))
        return MicroblogListResponse(microblogs=microblogs, count=len(microblogs))

    @app.post("/microblogs", response_model=MicroblogResponse)
    def create_microblog(
        body: CreateMicroblogRequest,
        token: str | None = Depends(get_bearer_token),
        gate: AuthorizationGate = Depends(get_gate),
        store: GraphStore = Depends(get_store),
    ):
        """
        Create a microblog and add it to the collection.

        Two independent writes: a crash in between leaves a node that
        the listing does not show.
        """
        enforce(gate, token, Permission.CREATE_MICROBLOG)

        microblog_id = generate_id()
        store.set_node(microblog_id, body.text)
        store.create_relation(Collections.MICROBLOG, Collections.MICROBLOG, microblog_id)

        logger.info(f"Created microblog {microblog_id}")
        return MicroblogResponse(id=microblog_id, text=body.text)

    @app.get("/microblogs/all", response_model=AllTextsResponse)
    def all_microblog_texts(store: GraphStore = Depends(get_store)):
        """Every stored node value, collection membership ignored."""
        texts = store.all_node_values()
        return AllTextsResponse(texts=texts, count=len(texts))

    @app.get("/microblogs/{id}", response_model=MicroblogResponse)
    def get_microblog(id: str, store: GraphStore = Depends(get_store)):
        """Get a microblog by ID."""
        text = store.get_node(id)
        if text is None:
            raise HTTPException(status_code=404, detail="Microblog not found")
        return MicroblogResponse(id=id, text=text)

    @app.delete("/microblogs/{id}", response_model=MessageResponse)
    def delete_microblog(
        id: str,
        token: str | None = Depends(get_bearer_token),
        gate: AuthorizationGate = Depends(get_gate),
        store: GraphStore = Depends(get_store),
    ):
        """Delete a microblog. Deleting an unknown id still succeeds."""
        enforce(gate, token, Permission.DELETE_MICROBLOG)

        store.delete_node(id)
        logger.info(f"Deleted microblog {id}")
        return MessageResponse(message="Microblog deleted")

    # =========================================================================
    # Relations
    # =========================================================================

    @app.get("/microblogs/{id}/relations", response_model=RelationListResponse)
    def list_relations(id: str, store: GraphStore = Depends(get_store)):
        """All relations leaving a microblog."""
        relations = store.query_relations_from(id)
        return RelationListResponse(id=id, relations=relations, count=len(relations))

    @app.get("/microblogs/{id}/relations/{name}", response_model=RelatedIdsResponse)
    def get_related(id: str, name: str, store: GraphStore = Depends(get_store)):
        """Destination ids of one named relation leaving a microblog."""
        return RelatedIdsResponse(id=id, relation=name, related_ids=store.related_ids(id, name))

    @app.post("/microblogs/{id}/relations/{name}", response_model=Relation)
    def create_relation(
        id: str,
        name: str,
        body: CreateRelationRequest,
        token: str | None = Depends(get_bearer_token),
        gate: AuthorizationGate = Depends(get_gate),
        store: GraphStore = Depends(get_store),
    ):
        """Relate a microblog to another id. Neither end is checked for existence."""
        enforce(gate, token, Permission.CREATE_RELATION)

        store.create_relation(id, name, body.related_id)
        return Relation(name=name, from_id=id, to_id=body.related_id)

    @app.delete("/microblogs/{id}/relations/{name}", response_model=MessageResponse)
    def delete_relations(
        id: str,
        name: str,
        token: str | None = Depends(get_bearer_token),
        gate: AuthorizationGate = Depends(get_gate),
        store: GraphStore = Depends(get_store),
    ):
        """
        Delete relations called `name`.

        Warning: this removes `name` relations from EVERY origin, not just
        from `id`. The path id only scopes the URL.
        """
        enforce(gate, token, Permission.DELETE_RELATION)

        store.delete_relations_by_name(name)
        logger.warning(f"Deleted all '{name}' relations (requested via {id})")
        return MessageResponse(message=f"All '{name}' relations deleted")

    @app.get("/microblogs/{id}/traverse", response_model=TraversalResponse)
    def traverse(
        id: str,
        relation: str = DEFAULT_TRAVERSAL_RELATION,
        order: Literal["depth", "breadth"] = "depth",
        store: GraphStore = Depends(get_store),
    ):
        """Ids reachable from a microblog over one relation name, in visit order."""
        visited = store.traverse(id, relation=relation, order=order)
        return TraversalResponse(start_id=id, relation=relation, order=order, visited=visited)


# =============================================================================
# Error Handling
# =============================================================================


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Storage failures surface as 500s; they are never retried."""
    capture_exception(exc, path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Storage error: {type(exc).__name__}"},
    )


# =============================================================================
# App Factory
# =============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    The lifespan opens the store and creates a fresh token registry.
    If the store can't be opened, StorageUnavailable propagates and
    startup fails.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup app resources."""
        init_sentry(settings)

        store = open_store(settings.database_path)
        try:
            registry = TokenRegistry(token_bytes=settings.token_bytes)
            app.state.settings = settings
            app.state.store = store
            app.state.tokens = registry
            app.state.gate = AuthorizationGate(registry)

            logger.info(f"rhyzome API starting in {settings.environment} mode")
            yield
        finally:
            store.close()
            logger.info("rhyzome API shut down")

    app = FastAPI(
        title="rhyzome API",
        description="Node + relation store guarded by single-use tokens",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, store_error_handler)
    app.include_router(tokens_router)
    register_routes(app)

    return app
