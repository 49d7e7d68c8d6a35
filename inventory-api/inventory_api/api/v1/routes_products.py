# inventory_api/api/v1/routes_products.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.deps import RowId, require_admin
from inventory_api.core.schemas import Envelope
from inventory_api.db.base import get_db
from inventory_api.domain.catalog.schemas import ProductCreate, ProductOut, ProductUpdate
from inventory_api.domain.catalog.service import (
    add_product,
    edit_product,
    get_catalog_product,
    list_catalog,
    remove_product,
)

router = APIRouter(
    prefix="/api/products",
    tags=["products"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=Envelope[List[ProductOut]])
async def list_products_endpoint(db: AsyncSession = Depends(get_db)):
    products = [ProductOut.model_validate(p) for p in await list_catalog(db)]
    return Envelope(data=products, count=len(products))


@router.get("/{product_id}", response_model=Envelope[ProductOut])
async def get_product_endpoint(product_id: RowId, db: AsyncSession = Depends(get_db)):
    product = await get_catalog_product(db, product_id)
    return Envelope(data=ProductOut.model_validate(product))


@router.post("", response_model=Envelope[ProductOut], status_code=201)
async def create_product_endpoint(payload: ProductCreate, db: AsyncSession = Depends(get_db)):
    product = await add_product(db, payload)
    return Envelope(message="Product created successfully", data=ProductOut.model_validate(product))


@router.put("/{product_id}", response_model=Envelope[ProductOut])
async def update_product_endpoint(
    product_id: RowId,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db),
):
    product = await edit_product(db, product_id, payload)
    return Envelope(message="Product updated successfully", data=ProductOut.model_validate(product))


@router.delete("/{product_id}", response_model=Envelope[None])
async def delete_product_endpoint(product_id: RowId, db: AsyncSession = Depends(get_db)):
    await remove_product(db, product_id)
    return Envelope(message="Product deleted successfully")
