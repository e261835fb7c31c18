"""Input Controls API — list control lifecycle over HTTP."""

import dataclasses
import logging
from typing import Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from httpx import HTTPStatusError
from pydantic import BaseModel, Field

from control import ControlServices
from control_models import ControlParams, Filter, Scalar, TimeRange
from database import create_db, engine
from errors import IndexPatternNotFoundError, SearchExecutionError
from filter_manager import as_values
from filter_store import SqlFilterStore
from index_patterns import KibanaConnection, KibanaIndexPatterns
from list_control import ListControl
from list_control_factory import list_control_factory
from search_service import ElasticSearchService, es

log = logging.getLogger(__name__)

app = FastAPI(title="Input Controls API", version="0.1.0")

filter_store = SqlFilterStore(engine)

# Controls live until the UI host releases them.
_controls: dict[str, ListControl] = {}


# ── Request / response schemas ────────────────────────────────────────


class CreateListControlRequest(BaseModel):
    control: ControlParams
    use_time_filter: bool = False
    time_range: Optional[TimeRange] = None


class FetchRequest(BaseModel):
    query: Optional[str] = Field(default=None, description="Text typed into a dynamic options control")


class ValueRequest(BaseModel):
    value: Union[list[Scalar], Scalar]


class ControlResponse(BaseModel):
    id: str
    type: str
    label: str
    field_name: str
    options: list[Scalar]
    value: Optional[Union[list[Scalar], Scalar]] = None
    has_value: bool
    enabled: bool
    disabled_reason: str = ""
    dynamic_options: bool
    multiselect: bool
    delimiter: str

    @classmethod
    def from_control(cls, control: ListControl) -> "ControlResponse":
        opts = control.control_params.options
        return cls(
            id=control.id,
            type=control.type,
            label=control.label,
            field_name=control.filter_field_name(),
            options=list(control.options),
            value=control.value,
            has_value=control.has_value(),
            enabled=control.enabled,
            disabled_reason=control.disabled_reason,
            dynamic_options=opts.dynamic_options,
            multiselect=opts.multiselect,
            delimiter=control.get_multi_select_delimiter(),
        )


# ── Error handlers ────────────────────────────────────────────────────


@app.exception_handler(IndexPatternNotFoundError)
async def index_pattern_not_found_handler(request, exc):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SearchExecutionError)
async def search_error_handler(request, exc):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(HTTPStatusError)
async def httpx_error_handler(request, exc):
    url = str(exc.request.url)
    status = exc.response.status_code
    if status == 404:
        return JSONResponse(
            status_code=404,
            content={"detail": f"Upstream resource not found: {url}"},
        )
    return JSONResponse(
        status_code=502,
        content={"detail": f"Upstream error {status}: {url}"},
    )


@app.on_event("startup")
async def on_startup():
    create_db()


@app.on_event("shutdown")
async def on_shutdown():
    await es.close()


# ── Dependencies ──────────────────────────────────────────────────────


def get_kibana_conn(
    x_kibana_url: str | None = Header(default=None),
    x_kibana_user: str | None = Header(default=None),
    x_kibana_pass: str | None = Header(default=None),
) -> KibanaConnection | None:
    """Extract optional Kibana connection override from request headers."""
    if not x_kibana_url:
        return None
    return KibanaConnection(
        url=x_kibana_url.rstrip("/"),
        username=x_kibana_user,
        password=x_kibana_pass,
    )


def get_services(
    conn: KibanaConnection | None = Depends(get_kibana_conn),
) -> ControlServices:
    return ControlServices(
        index_patterns=KibanaIndexPatterns(conn),
        search=ElasticSearchService(),
        filter_store=filter_store,
    )


def _get_control(control_id: str) -> ListControl:
    control = _controls.get(control_id)
    if control is None:
        raise HTTPException(status_code=404, detail="Control not found")
    return control


# ── Endpoints ─────────────────────────────────────────────────────────


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/controls/list", response_model=ControlResponse, status_code=201)
async def create_list_control(
    body: CreateListControlRequest,
    services: ControlServices = Depends(get_services),
):
    if body.time_range is not None:
        services = dataclasses.replace(services, time_range=body.time_range)
    control = await list_control_factory(
        body.control, services, use_time_filter=body.use_time_filter
    )
    _controls[control.id] = control
    return ControlResponse.from_control(control)


@app.get("/api/controls/{control_id}", response_model=ControlResponse)
def get_control(control_id: str):
    return ControlResponse.from_control(_get_control(control_id))


@app.post("/api/controls/{control_id}/fetch", response_model=ControlResponse)
async def fetch_control(control_id: str, body: FetchRequest):
    control = _get_control(control_id)
    await control.fetch(body.query)
    return ControlResponse.from_control(control)


@app.put("/api/controls/{control_id}/value", response_model=ControlResponse)
def set_control_value(control_id: str, body: ValueRequest):
    control = _get_control(control_id)
    if not control.is_enabled():
        raise HTTPException(status_code=409, detail=control.disabled_reason)

    values = as_values(body.value)
    if not values:
        raise HTTPException(status_code=422, detail="Value must not be empty")
    if len(values) > 1 and not control.control_params.options.multiselect:
        raise HTTPException(status_code=422, detail="Control accepts a single value")

    control.set(body.value)
    control.filter_manager.create_filter(control.value)
    return ControlResponse.from_control(control)


@app.delete("/api/controls/{control_id}/value", response_model=ControlResponse)
def clear_control_value(control_id: str):
    control = _get_control(control_id)
    control.filter_manager.remove_filter()
    control.clear()
    return ControlResponse.from_control(control)


@app.delete("/api/controls/{control_id}", status_code=204)
def release_control(control_id: str):
    _get_control(control_id)
    del _controls[control_id]
    return None


@app.get("/api/filters", response_model=list[Filter])
def list_filters():
    return filter_store.get_filters()
