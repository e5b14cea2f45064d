from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from restbucks.api.hal import HalFormsJSONResponse, RequestLinkBuilder
from restbucks.application.dto.responses import RelationDocsResponse
from restbucks.application.mappers.relations import RELATION_DOCS, curie
from restbucks.application.mappers.root_mapper import to_root_response

router = APIRouter()


@router.get("/", response_class=HalFormsJSONResponse)
def root(request: Request) -> HalFormsJSONResponse:
    return HalFormsJSONResponse(content=to_root_response(RequestLinkBuilder(request)).to_hal())


@router.get("/docs/{rel}", response_model=RelationDocsResponse)
def relation_docs(rel: str) -> RelationDocsResponse:
    description = RELATION_DOCS.get(rel)
    if description is None:
        raise HTTPException(status_code=404, detail=f"unknown relation {rel}")
    return RelationDocsResponse(rel=curie(rel), description=description)
