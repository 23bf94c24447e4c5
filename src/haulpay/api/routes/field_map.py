"""Endpoints for viewing and editing the fuel import column mapping."""

from __future__ import annotations

from fastapi import APIRouter, Request

from haulpay.models.field_map import FieldMap

router = APIRouter(prefix="/field-map", tags=["field-map"])


def _body(field_map: FieldMap) -> dict:
    return {"mappings": dict(field_map.items())}


@router.get("")
def get_field_map(request: Request) -> dict:
    return _body(request.app.state.field_map_store.load())


@router.put("")
def update_field_map(request: Request, mappings: dict[str, str]) -> dict:
    """Set headers for the given logical fields; other fields keep their value."""
    store = request.app.state.field_map_store
    field_map = store.load()
    for field, header in mappings.items():
        field_map.set(field, header)
    store.save(field_map)
    return _body(field_map)


@router.post("/reset")
def reset_field_map(request: Request) -> dict:
    field_map = FieldMap.load_default()
    request.app.state.field_map_store.save(field_map)
    return _body(field_map)
