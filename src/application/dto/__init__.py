"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
"""

from src.application.dto.requests import (
    CompleteItemRequest,
    ConsumeIngredientRequest,
    CreateIngredientRequest,
    CreateOrderRequest,
    CreatePlanRequest,
    CreateProductRequest,
    CreateStoreRequest,
    EntityRef,
    OrderItemRequest,
    PlanDetailRequest,
    PlanItemRequest,
    ReceiveBatchRequest,
    RecipeLineRequest,
    UpdateOrderStatusRequest,
    UpdatePlanStatusRequest,
    normalize_entity_ref,
)
from src.application.dto.responses import (
    AllocationResponse,
    BatchDrawResponse,
    BatchTraceResponse,
    CompletionResponse,
    ConsumeResponse,
    ErrorResponse,
    HealthResponse,
    IngredientBatchResponse,
    IngredientResponse,
    IngredientStockResponse,
    MovementResponse,
    OnHandResponse,
    OrderResponse,
    PlanDetailResponse,
    PlanResponse,
    ProductBatchResponse,
    ProductDemandResponse,
    ProductResponse,
    ProductStockResponse,
    StoreProductStockResponse,
    StoreResponse,
)

__all__ = [
    # Requests
    "EntityRef",
    "normalize_entity_ref",
    "CreateProductRequest",
    "RecipeLineRequest",
    "CreateStoreRequest",
    "CreateIngredientRequest",
    "ReceiveBatchRequest",
    "ConsumeIngredientRequest",
    "CreatePlanRequest",
    "PlanDetailRequest",
    "UpdatePlanStatusRequest",
    "CompleteItemRequest",
    "PlanItemRequest",
    "CreateOrderRequest",
    "OrderItemRequest",
    "UpdateOrderStatusRequest",
    # Responses
    "ProductResponse",
    "StoreResponse",
    "IngredientResponse",
    "IngredientBatchResponse",
    "OnHandResponse",
    "BatchDrawResponse",
    "ConsumeResponse",
    "MovementResponse",
    "PlanResponse",
    "PlanDetailResponse",
    "ProductBatchResponse",
    "CompletionResponse",
    "BatchTraceResponse",
    "OrderResponse",
    "AllocationResponse",
    "IngredientStockResponse",
    "StoreProductStockResponse",
    "ProductStockResponse",
    "ProductDemandResponse",
    "HealthResponse",
    "ErrorResponse",
]
