"""
Buch catalog service.
"""

import json
from typing import List, Optional

from fastapi import Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from service_auth.app.auth_service import AuthService
from service_auth.app.main import build_auth_service
from service_auth.app.routes import RolesAllowed, create_auth_router
from shared.base_service import BaseService
from shared.config import BaseConfig, ServiceConfig

from .model.buch import BuchQuery, buch_from_payload
from .notify.mailer import BackgroundNotifications, Notifier, create_notifier
from .persistence import BuchStore, MemoryBuchStore, MongoBuchStore
from .service.buch_service import BuchService
from .service.exceptions import ValidationError, VersionMissing


def create_store(config: BaseConfig) -> BuchStore:
    """Create the configured store adapter."""
    if config.store_backend == "memory":
        return MemoryBuchStore()
    return MongoBuchStore.from_uri(config.mongo_uri, config.mongo_db)


def _etag(version: int) -> str:
    return f'"{version}"'


def _accepts_json(request: Request) -> bool:
    content_type = request.headers.get("Content-Type", "")
    return content_type.split(";")[0].strip().lower() == "application/json"


async def _read_json(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError({"body": "The request body is not valid JSON."}) from None


class BuchApplication(BaseService):
    """Catalog service with login and CRUD routes."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        auth_service: Optional[AuthService] = None,
        store: Optional[BuchStore] = None,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__("buch", config)
        self.auth_service = auth_service or build_auth_service(self.config, self.metrics)
        self.store = store or create_store(self.config)
        self.notifications = BackgroundNotifications(notifier or create_notifier(self.config))
        self.buch_service = BuchService(
            self.store,
            self.notifications,
            max_rating=self.config.max_rating,
            metrics=self.metrics,
        )
        self._setup_buch_routes()

    async def startup(self):
        if isinstance(self.store, MongoBuchStore):
            await self.store.initialize()

    async def shutdown(self):
        await self.notifications.drain()
        await self.store.close()

    async def _check_dependencies(self):
        return {"store": "ok" if await self.store.ping() else "unavailable"}

    def _setup_buch_routes(self):
        """Set up catalog routes."""
        writers = RolesAllowed(self.auth_service, ["admin", "mitarbeiter"])
        admins = RolesAllowed(self.auth_service, ["admin"])

        self.app.include_router(create_auth_router(self.auth_service))

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "buch",
                "message": "Buch catalog backend",
                "version": "1.0.0"
            }

        @self.app.get("/buecher")
        async def find_buecher(
            title: Optional[str] = None,
            keyword: List[str] = Query(default=[]),
            kind: Optional[str] = None,
            publisher: Optional[str] = None,
        ):
            """Search books; 404 if nothing matches."""
            query = BuchQuery(title=title, keywords=keyword, kind=kind, publisher=publisher)
            buecher = await self.buch_service.find(query)
            if not buecher:
                return Response(status_code=404)
            return [buch.to_json() for buch in buecher]

        @self.app.get("/buecher/{buch_id}", name="find_buch_by_id")
        async def find_buch_by_id(buch_id: str, request: Request):
            """Get a book with its version as ETag."""
            buch = await self.buch_service.find_by_id(buch_id)
            if buch is None:
                return Response(status_code=404)

            etag = _etag(buch.version)
            if_none_match = request.headers.get("If-None-Match")
            if if_none_match is not None and if_none_match.strip() in (etag, str(buch.version)):
                return Response(status_code=304, headers={"ETag": etag})

            return JSONResponse(content=buch.to_json(), headers={"ETag": etag})

        @self.app.post("/buecher", status_code=201, dependencies=[Depends(writers)])
        async def create_buch(request: Request):
            """Create a book from a JSON body."""
            if not _accepts_json(request):
                return Response(status_code=406)

            buch = buch_from_payload(await _read_json(request))
            saved = await self.buch_service.create(buch)
            location = str(request.url_for("find_buch_by_id", buch_id=saved.id))
            return Response(status_code=201, headers={"Location": location, "ETag": _etag(saved.version)})

        @self.app.put("/buecher/{buch_id}", status_code=204, dependencies=[Depends(writers)])
        async def update_buch(buch_id: str, request: Request):
            """Replace a book; the expected version travels in If-Match."""
            if not _accepts_json(request):
                return Response(status_code=406)

            version = request.headers.get("If-Match")
            if version is None:
                raise VersionMissing()

            buch = buch_from_payload(await _read_json(request), buch_id=buch_id)
            updated = await self.buch_service.update(buch, version)
            return Response(status_code=204, headers={"ETag": _etag(updated.version)})

        @self.app.delete("/buecher/{buch_id}", status_code=204, dependencies=[Depends(admins)])
        async def delete_buch(buch_id: str):
            """Delete a book; deleting an unknown id succeeds as well."""
            await self.buch_service.remove(buch_id)
            return Response(status_code=204)


def create_app():
    """Create the ASGI application."""
    return BuchApplication().app


if __name__ == "__main__":
    BuchApplication().run()
