"""
Product and store catalog endpoints.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_catalog
from src.application.dto.requests import CreateProductRequest, CreateStoreRequest
from src.application.dto.responses import ErrorResponse, ProductResponse, StoreResponse
from src.core.entities import RecipeLine
from src.core.services import CatalogService

router = APIRouter(prefix="/api", tags=["catalog"])


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_product(
    request: CreateProductRequest,
    service: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    """Create a product together with its recipe."""
    product = await service.create_product(
        name=request.name,
        sku=request.sku,
        shelf_life_days=request.shelf_life_days,
        price=request.price,
        unit=request.unit,
        recipe=[
            RecipeLine(ingredient_id=line.ingredient_id, quantity=line.quantity)
            for line in request.recipe
        ],
    )
    return ProductResponse.model_validate(product)


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    service: CatalogService = Depends(get_catalog),
) -> list[ProductResponse]:
    products = await service.list_products(limit=limit, offset=offset)
    return [ProductResponse.model_validate(p) for p in products]


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog),
) -> ProductResponse:
    return ProductResponse.model_validate(await service.get_product(product_id))


@router.post(
    "/stores",
    response_model=StoreResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_store(
    request: CreateStoreRequest,
    service: CatalogService = Depends(get_catalog),
) -> StoreResponse:
    """Register a franchise store."""
    store = await service.create_store(
        store_name=request.store_name,
        store_code=request.store_code,
        address=request.address,
        phone=request.phone,
        status=request.status,
    )
    return StoreResponse.model_validate(store)


@router.get("/stores", response_model=list[StoreResponse])
async def list_stores(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    service: CatalogService = Depends(get_catalog),
) -> list[StoreResponse]:
    stores = await service.list_stores(limit=limit, offset=offset)
    return [StoreResponse.model_validate(s) for s in stores]


@router.get(
    "/stores/{store_id}",
    response_model=StoreResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_store(
    store_id: int,
    service: CatalogService = Depends(get_catalog),
) -> StoreResponse:
    return StoreResponse.model_validate(await service.get_store(store_id))
