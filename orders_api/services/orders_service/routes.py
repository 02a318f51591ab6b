from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from orders_api.common.constants import MAX_ORDER_ID
from orders_api.common.context import OperationContext
from orders_api.config import settings
from orders_api.core.orders.models import FindAllPage, Order, OrderCreateDTO, OrderUpdateDTO
from orders_api.core.orders.service import OrderService
from orders_api.services.orders_service.dependencies import get_operation_context, get_order_service
from orders_api.services.orders_service.schemas import OrderPageResponse

router = APIRouter(prefix="/orders", tags=["Orders"])

OrderId = Annotated[int, Path(ge=1, le=MAX_ORDER_ID, description="ID заказа")]


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateDTO,
    service: OrderService = Depends(get_order_service),
    ctx: OperationContext = Depends(get_operation_context),
):
    return await service.create_order(request, ctx)


@router.get("", response_model=OrderPageResponse)
async def list_orders(
    offset: int = Query(0, ge=0),
    size: Optional[int] = Query(None, ge=0),
    service: OrderService = Depends(get_order_service),
    ctx: OperationContext = Depends(get_operation_context),
):
    if size is None:
        size = settings.store.DEFAULT_PAGE_SIZE
    page = FindAllPage(size=min(size, settings.store.MAX_PAGE_SIZE), offset=offset)
    result = await service.list_orders(page, ctx)
    return OrderPageResponse(items=result.orders, next_offset=result.next_offset, partial=result.partial)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: OrderId,
    service: OrderService = Depends(get_order_service),
    ctx: OperationContext = Depends(get_operation_context),
):
    return await service.get_order(order_id, ctx)


@router.put("/{order_id}", response_model=Order)
async def update_order(
    request: OrderUpdateDTO,
    order_id: OrderId,
    service: OrderService = Depends(get_order_service),
    ctx: OperationContext = Depends(get_operation_context),
):
    return await service.update_status(order_id, request.status, ctx)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: OrderId,
    service: OrderService = Depends(get_order_service),
    ctx: OperationContext = Depends(get_operation_context),
):
    await service.delete_order(order_id, ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
