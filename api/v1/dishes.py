# api/v1/dishes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from core.catalog import DishCatalog
from core.models.dish import Dish
from api.v1.deps import get_catalog

router = APIRouter()


@router.get("", response_model=list[Dish], summary="List the dish library")
async def list_dishes(catalog: DishCatalog = Depends(get_catalog)) -> list[Dish]:
    return await catalog.list_dishes()


@router.post("", response_model=Dish, status_code=status.HTTP_201_CREATED)
async def create_dish(body: Dish, catalog: DishCatalog = Depends(get_catalog)) -> Dish:
    return await catalog.add_dish(body)


@router.get("/{dish_id}", response_model=Dish)
async def fetch_dish(dish_id: str, catalog: DishCatalog = Depends(get_catalog)) -> Dish:
    return await catalog.get_dish(dish_id)


@router.put("/{dish_id}", response_model=Dish)
async def replace_dish(
    dish_id: str,
    body: Dish,
    catalog: DishCatalog = Depends(get_catalog),
) -> Dish:
    return await catalog.update_dish(body.model_copy(update={"id": dish_id}))


@router.delete(
    "/{dish_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a dish and every schedule placement of it",
)
async def delete_dish(dish_id: str, catalog: DishCatalog = Depends(get_catalog)) -> Response:
    await catalog.delete_dish(dish_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
