from __future__ import annotations
from typing import Dict
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel
from . import __version__
from .errors import InvalidEntryError, KeyNotFoundError
from .service import ConfigService

class ActionResult(BaseModel):
    ok: bool
    detail: str | None = None
    data: dict | None = None

class ValueBody(BaseModel):
    value: str

def create_app(service: ConfigService) -> FastAPI:
    """HTTP front for a running ConfigService. The caller owns start/stop."""
    app = FastAPI(title="nodeconf API", version=__version__)

    @app.get("/health")
    def health():
        return {"ok": True, "state": service.state.value}

    @app.get("/config")
    def all_config():
        out: Dict[str, Dict[str, str]] = {}
        for (section, key), value in service.all():
            out.setdefault(section, {})[key] = value
        return out

    @app.get("/config/{section}")
    def get_section(section: str):
        return dict(sorted(service.get(section)))

    @app.get("/config/{section}/{key}")
    def get_value(section: str, key: str):
        value = service.get(section, key)
        if value is None:
            raise HTTPException(status_code=404, detail="key_not_found")
        return value

    @app.put("/config/{section}/{key}", response_model=ActionResult)
    def put_value(section: str, key: str, body: ValueBody, persist: bool = Query(default=True)):
        try:
            previous = service.set(section, key, body.value, persist)
        except InvalidEntryError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return ActionResult(ok=True, detail="updated", data={"previous": previous})

    @app.delete("/config/{section}/{key}", response_model=ActionResult)
    def delete_value(section: str, key: str, persist: bool = Query(default=True)):
        try:
            previous = service.delete(section, key, persist)
        except KeyNotFoundError:
            raise HTTPException(status_code=404, detail="key_not_found")
        return ActionResult(ok=True, detail="deleted", data={"previous": previous})

    return app
