from fastapi import APIRouter, Depends, Path, Query, Request, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from .db import get_db
from .schemas import CardCreate, CardOut, CardUpdate, PageResp
from .search import MAX_INT, CardFilter, PageRequest, SortSpec
from . import store

router = APIRouter()


def page_params(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
) -> PageRequest:
    return PageRequest.from_params(page, limit)


def sort_params(
    sort_field: Optional[str] = Query(None, alias="sortField"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
) -> SortSpec:
    return SortSpec.from_params(sort_field, sort_order)


def page_response(result: store.CardPage) -> dict:
    return {
        "data": result.items,
        "total": result.total,
        "page": result.page,
        "limit": result.limit,
    }


def filter_params(request: Request) -> CardFilter:
    params = {key: request.query_params.get(key) for key in request.query_params}
    # axios serialises arrays as tags[]=a&tags[]=b
    tags = request.query_params.getlist("tags") or request.query_params.getlist("tags[]")
    params["tags"] = tags or None
    return CardFilter.from_params(params)


@router.get("/cards", response_model=PageResp)
def list_cards(
    page: PageRequest = Depends(page_params),
    sort: SortSpec = Depends(sort_params),
    db: Session = Depends(get_db),
):
    return page_response(store.list_cards(db, page, sort))


# registered before /cards/{card_id} so the path is not read as an id
@router.get("/cards/recent-players", response_model=List[str])
def recent_players(db: Session = Depends(get_db)):
    return store.recent_players(db)


@router.get("/cards/{card_id}", response_model=CardOut)
def get_card(
    card_id: int = Path(..., le=MAX_INT),
    db: Session = Depends(get_db),
):
    return store.get_card(db, card_id)


@router.post("/cards", response_model=CardOut, status_code=201)
def create_card(body: CardCreate, db: Session = Depends(get_db)):
    return store.create_card(db, body.model_dump(exclude_unset=True))


@router.put("/cards/{card_id}", response_model=CardOut)
def update_card(
    body: CardUpdate,
    card_id: int = Path(..., le=MAX_INT),
    db: Session = Depends(get_db),
):
    return store.update_card(db, card_id, body.model_dump(exclude_unset=True))


@router.delete("/cards/{card_id}", status_code=204)
def delete_card(
    card_id: int = Path(..., le=MAX_INT),
    db: Session = Depends(get_db),
):
    store.delete_card(db, card_id)
    return Response(status_code=204)


@router.get("/search", response_model=PageResp)
def search_cards(
    card_filter: CardFilter = Depends(filter_params),
    page: PageRequest = Depends(page_params),
    sort: SortSpec = Depends(sort_params),
    db: Session = Depends(get_db),
):
    return page_response(store.search_cards(db, card_filter, page, sort))
