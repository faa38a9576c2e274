"""FastAPI endpoints for orders and products.

Routes only translate HTTP into commands, services and queries. Ownership
and lifecycle rules live in the aggregates and handlers.
"""

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.analytics.report import seller_analytics
from marketplace.api.auth import Principal, current_principal, require_role
from marketplace.api.schemas import (
    AddProductRequest,
    AnalyticsResponse,
    ArchiveRequest,
    BulkArchiveRequest,
    BulkHideRequest,
    CancelOrderRequest,
    CatalogueResponse,
    CountResponse,
    CreateOrderRequest,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    OrdersCreatedResponse,
    ProductEnvelope,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    RestockRequest,
    SellerOrderListResponse,
    StatusResponse,
    UpdateProductRequest,
    UpdateStatusRequest,
)
from marketplace.checkout.service import CheckoutService, Delivery, ProofUpload
from marketplace.order.cancellation import cancel_by_customer
from marketplace.order.order import Order
from marketplace.order.queries import get_order, list_my_orders, list_seller_orders
from marketplace.order.status import UpdateOrderStatus, VerifyPayment
from marketplace.order.visibility import ArchiveOrder, BulkArchiveOrders, BulkHideOrdersForBuyer, HideOrderForBuyer
from marketplace.product.ledger import StockLedger
from marketplace.product.management import AddProduct, DeleteProduct, UpdateProductDetails
from marketplace.product.product import Product
from marketplace.product.queries import get_product, list_products, list_seller_products

order_router = APIRouter(prefix="/orders", tags=["orders"])
product_router = APIRouter(prefix="/products", tags=["products"])

customer_only = require_role("customer")
seller_only = require_role("seller")


def order_response(order: Order) -> OrderResponse:
    address = order.delivery_address
    return OrderResponse(
        id=str(order.id),
        buyer_id=str(order.buyer_id),
        seller_id=str(order.seller_id),
        lines=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "price": line.price,
                "quantity": line.quantity,
                "unit": line.unit,
                "image": line.image,
            }
            for line in order.lines
        ],
        total=order.total,
        status=order.status,
        payment_method=order.payment_method,
        payment_proof=order.payment_proof,
        payment_verified=bool(order.payment_verified),
        market_location=order.market_location,
        note=order.note,
        status_history=[
            {"status": entry.status, "note": entry.note, "timestamp": entry.timestamp} for entry in order.history()
        ],
        is_archived=bool(order.is_archived),
        is_hidden_by_buyer=bool(order.is_hidden_by_buyer),
        delivery_type=order.delivery_type,
        delivery_address=(
            {
                "full_address": address.full_address,
                "barangay": address.barangay,
                "city": address.city,
                "province": address.province,
                "postal_code": address.postal_code,
                "contact_phone": address.contact_phone,
            }
            if address
            else None
        ),
        delivery_fee=order.delivery_fee or 0.0,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        seller_id=str(product.seller_id),
        name=product.name,
        description=product.description,
        price=product.price,
        quantity=product.quantity,
        unit=product.unit,
        category=product.category,
        market_location=product.market_location,
        is_available=bool(product.is_available),
        image=product.image,
        low_stock_threshold=product.low_stock_threshold,
        is_low_stock=product.is_low_stock,
    )


def _reload(order_id) -> Order:
    return current_domain.repository_for(Order).find(order_id)


# --- Customer endpoints ---


@order_router.post("", status_code=201, response_model=OrdersCreatedResponse)
async def create_order(body: CreateOrderRequest, principal: Principal = Depends(customer_only)) -> OrdersCreatedResponse:
    delivery = Delivery(
        type=body.delivery.type,
        address=body.delivery.address.model_dump() if body.delivery.address else None,
        fee=body.delivery.fee,
    )
    proofs = {
        seller_id: ProofUpload(content=proof.content(), filename=proof.filename)
        for seller_id, proof in body.payment_proofs.items()
    }
    orders = CheckoutService().place_orders(
        buyer_id=principal.principal_id,
        cart=[item.model_dump() for item in body.items],
        note=body.note,
        payment_methods=body.payment_methods,
        delivery=delivery,
        proofs=proofs,
        buyer_name=principal.name,
    )
    return OrdersCreatedResponse(
        message=f"{len(orders)} order(s) created successfully",
        orders=[order_response(order) for order in orders],
    )


@order_router.get("/my-orders", response_model=OrderListResponse)
async def my_orders(principal: Principal = Depends(current_principal)) -> OrderListResponse:
    orders = list_my_orders(principal.principal_id)
    return OrderListResponse(count=len(orders), orders=[order_response(order) for order in orders])


@order_router.put("/bulk-hide-buyer", response_model=CountResponse)
async def bulk_hide_for_buyer(body: BulkHideRequest, principal: Principal = Depends(customer_only)) -> CountResponse:
    count = current_domain.process(
        BulkHideOrdersForBuyer(buyer_id=principal.principal_id, order_ids=json.dumps(body.order_ids)),
        asynchronous=False,
    )
    return CountResponse(message=f"{count} order(s) hidden", modified_count=count)


@order_router.put("/{order_id}/cancel-customer", response_model=OrderEnvelope)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, principal: Principal = Depends(customer_only)
) -> OrderEnvelope:
    order = cancel_by_customer(order_id, principal.principal_id, reason=body.reason)
    return OrderEnvelope(order=order_response(order))


@order_router.put("/{order_id}/hide-buyer", response_model=StatusResponse)
async def hide_for_buyer(order_id: str, principal: Principal = Depends(customer_only)) -> StatusResponse:
    current_domain.process(
        HideOrderForBuyer(order_id=order_id, buyer_id=principal.principal_id),
        asynchronous=False,
    )
    return StatusResponse(message="Order hidden from your history")


# --- Seller endpoints ---


@order_router.get("/seller", response_model=SellerOrderListResponse)
async def seller_orders(
    status: str | None = None,
    archived: bool | None = None,
    principal: Principal = Depends(seller_only),
) -> SellerOrderListResponse:
    result = list_seller_orders(principal.principal_id, status=status, archived=archived)
    return SellerOrderListResponse(
        count=result.count,
        status_counts=result.status_counts,
        orders=[order_response(order) for order in result.orders],
    )


@order_router.get("/seller/analytics", response_model=AnalyticsResponse)
async def analytics(
    period: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    principal: Principal = Depends(seller_only),
) -> AnalyticsResponse:
    report = seller_analytics(principal.principal_id, period=period, start=start_date, end=end_date)
    data = asdict(report)
    data.pop("seller_id")
    return AnalyticsResponse(**data)


@order_router.put("/bulk-archive", response_model=CountResponse)
async def bulk_archive(body: BulkArchiveRequest, principal: Principal = Depends(seller_only)) -> CountResponse:
    count = current_domain.process(
        BulkArchiveOrders(
            seller_id=principal.principal_id,
            order_ids=json.dumps(body.order_ids),
            archive=body.archive,
        ),
        asynchronous=False,
    )
    verb = "archived" if body.archive else "unarchived"
    return CountResponse(message=f"{count} order(s) {verb}", modified_count=count)


@order_router.put("/{order_id}/status", response_model=OrderEnvelope)
async def update_status(
    order_id: str, body: UpdateStatusRequest, principal: Principal = Depends(seller_only)
) -> OrderEnvelope:
    current_domain.process(
        UpdateOrderStatus(order_id=order_id, seller_id=principal.principal_id, status=body.status, note=body.note),
        asynchronous=False,
    )
    return OrderEnvelope(order=order_response(_reload(order_id)))


@order_router.put("/{order_id}/payment", response_model=OrderEnvelope)
async def verify_payment(order_id: str, principal: Principal = Depends(seller_only)) -> OrderEnvelope:
    current_domain.process(
        VerifyPayment(order_id=order_id, seller_id=principal.principal_id),
        asynchronous=False,
    )
    return OrderEnvelope(order=order_response(_reload(order_id)))


@order_router.put("/{order_id}/archive", response_model=OrderEnvelope)
async def archive_order(
    order_id: str, body: ArchiveRequest, principal: Principal = Depends(seller_only)
) -> OrderEnvelope:
    current_domain.process(
        ArchiveOrder(order_id=order_id, seller_id=principal.principal_id, archive=body.archive),
        asynchronous=False,
    )
    return OrderEnvelope(order=order_response(_reload(order_id)))


# --- Shared ---


@order_router.get("/{order_id}", response_model=OrderEnvelope)
async def read_order(order_id: str, principal: Principal = Depends(current_principal)) -> OrderEnvelope:
    return OrderEnvelope(order=order_response(get_order(order_id, principal.principal_id)))


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, principal: Principal = Depends(seller_only)) -> ProductIdResponse:
    product_id = current_domain.process(
        AddProduct(seller_id=principal.principal_id, **body.model_dump()),
        asynchronous=False,
    )
    return ProductIdResponse(product_id=product_id)


@product_router.get("", response_model=CatalogueResponse)
async def catalogue(
    market: str | None = None, category: str | None = None, search: str | None = None
) -> CatalogueResponse:
    products = list_products(market=market, category=category, search=search)
    return CatalogueResponse(count=len(products), products=[product_response(product) for product in products])


@product_router.get("/mine", response_model=ProductListResponse)
async def my_products(principal: Principal = Depends(seller_only)) -> ProductListResponse:
    result = list_seller_products(principal.principal_id)
    return ProductListResponse(
        count=len(result.products),
        low_stock_count=result.low_stock_count,
        products=[product_response(product) for product in result.products],
    )


@product_router.get("/{product_id}", response_model=ProductEnvelope)
async def read_product(product_id: str) -> ProductEnvelope:
    return ProductEnvelope(product=product_response(get_product(product_id)))


@product_router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product(
    product_id: str, body: UpdateProductRequest, principal: Principal = Depends(seller_only)
) -> ProductEnvelope:
    current_domain.process(
        UpdateProductDetails(product_id=product_id, seller_id=principal.principal_id, **body.model_dump()),
        asynchronous=False,
    )
    product = current_domain.repository_for(Product).get(product_id)
    return ProductEnvelope(product=product_response(product))


@product_router.put("/{product_id}/restock", response_model=ProductEnvelope)
async def restock_product(
    product_id: str, body: RestockRequest, principal: Principal = Depends(seller_only)
) -> ProductEnvelope:
    movement = StockLedger().restock(product_id, principal.principal_id, body.quantity)
    return ProductEnvelope(product=product_response(movement.product))


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, principal: Principal = Depends(seller_only)) -> StatusResponse:
    current_domain.process(
        DeleteProduct(product_id=product_id, seller_id=principal.principal_id),
        asynchronous=False,
    )
    return StatusResponse(message="Product deleted successfully")
