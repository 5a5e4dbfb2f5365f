"""Wire serialization for domain events.

Events travel as camelCase JSON documents tagged with ``eventType``::

    {"eventId": "...", "eventType": "OrderCreated", "orderId": 1, ...}

The codec is the single place that knows this format. Decoding routes on
the tag explicitly: an unknown tag raises ``UnknownEventTypeError`` and a
known tag with missing or ill-typed fields raises ``MalformedEventError``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, get_args

from shared_kernel.events import (
    UNCATEGORIZED,
    DomainEvent,
    LineItem,
    MalformedEventError,
    OrderCreated,
    PriceChanged,
    ProductCreated,
    UnknownEventTypeError,
)

ORDER_EVENTS_TOPIC = "order-events"
PRODUCT_EVENTS_TOPIC = "product-events"

# Bounds of the read-model columns: INTEGER ids and counts, NUMERIC(14, 2) money
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
MONEY_LIMIT = Decimal(10) ** 12

_SUPPORTED_EVENTS: frozenset[str] = frozenset(
    cls.__name__ for cls in get_args(DomainEvent)
)

_TOPICS: dict[type, str] = {
    OrderCreated: ORDER_EVENTS_TOPIC,
    ProductCreated: PRODUCT_EVENTS_TOPIC,
    PriceChanged: PRODUCT_EVENTS_TOPIC,
}


class EventCodec:
    """Serializes and deserializes domain events to the wire format."""

    def __init__(self) -> None:
        self._decoders: dict[str, Callable[[dict[str, Any]], DomainEvent]] = {
            "OrderCreated": self._decode_order_created,
            "ProductCreated": self._decode_product_created,
            "PriceChanged": self._decode_price_changed,
        }

    def supported_event_types(self) -> frozenset[str]:
        """Return the event type names this codec handles."""
        return _SUPPORTED_EVENTS

    def topic_for(self, event: DomainEvent) -> str:
        """Return the delivery topic an event is published under.

        Raises:
            ValueError: If the event type is not supported
        """
        topic = _TOPICS.get(type(event))
        if topic is None:
            raise ValueError(f"Unsupported event type: {type(event).__name__}")
        return topic

    def serialize(self, event: DomainEvent) -> dict[str, Any]:
        """Convert a domain event to its JSON-compatible wire dictionary.

        Args:
            event: The domain event to serialize

        Returns:
            camelCase dictionary including ``eventId``, ``eventType`` and
            ``timestamp``

        Raises:
            ValueError: If the event type is not supported
        """
        match event:
            case OrderCreated():
                body: dict[str, Any] = {
                    "orderId": event.order_id,
                    "customerId": event.customer_id,
                    "items": [
                        {
                            "productId": item.product_id,
                            "quantity": item.quantity,
                            "price": float(item.price),
                            "category": item.category,
                        }
                        for item in event.items
                    ],
                    "total": float(event.total),
                }
            case ProductCreated():
                body = {
                    "productId": event.product_id,
                    "name": event.name,
                    "category": event.category,
                    "price": float(event.price),
                    "stock": event.stock,
                }
            case PriceChanged():
                body = {
                    "productId": event.product_id,
                    "oldPrice": float(event.old_price),
                    "newPrice": float(event.new_price),
                }
            case _:
                raise ValueError(f"Unsupported event type: {type(event).__name__}")

        return {
            "eventId": event.event_id,
            "eventType": type(event).__name__,
            **body,
            "timestamp": event.timestamp.isoformat(),
        }

    def deserialize(self, payload: dict[str, Any]) -> DomainEvent:
        """Reconstruct a domain event from its wire dictionary.

        Raises:
            UnknownEventTypeError: If ``eventType`` is missing or unknown
            MalformedEventError: If a required field is missing or ill-typed
        """
        if not isinstance(payload, dict):
            raise MalformedEventError("Event payload must be a JSON object")

        event_type = payload.get("eventType")
        decoder = self._decoders.get(event_type) if isinstance(event_type, str) else None
        if decoder is None:
            raise UnknownEventTypeError(
                f"Unknown event type: {event_type!r}",
                event_type=event_type if isinstance(event_type, str) else None,
            )

        try:
            return decoder(payload)
        except MalformedEventError as e:
            e.event_type = event_type
            raise

    def encode(self, event: DomainEvent) -> bytes:
        """Serialize an event straight to UTF-8 JSON bytes."""
        return json.dumps(self.serialize(event)).encode("utf-8")

    def decode(self, body: bytes) -> DomainEvent:
        """Parse UTF-8 JSON bytes into a domain event.

        Raises:
            UnknownEventTypeError: If the event type is unknown
            MalformedEventError: If the body is not valid JSON or a field is bad
        """
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedEventError(f"Event body is not valid JSON: {e}") from e
        return self.deserialize(payload)

    def _decode_order_created(self, payload: dict[str, Any]) -> OrderCreated:
        raw_items = _require(payload, "items")
        if not isinstance(raw_items, list):
            raise MalformedEventError("Field 'items' must be a list")

        items = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                raise MalformedEventError("Each order item must be an object")
            items.append(
                LineItem(
                    product_id=_as_int(_require(raw, "productId"), "productId"),
                    quantity=_as_int(_require(raw, "quantity"), "quantity"),
                    price=_as_decimal(_require(raw, "price"), "price"),
                    category=raw.get("category") or UNCATEGORIZED,
                )
            )

        return OrderCreated(
            event_id=_as_event_id(_require(payload, "eventId")),
            order_id=_optional_int(payload.get("orderId"), "orderId"),
            customer_id=str(_require(payload, "customerId")),
            items=tuple(items),
            total=_as_decimal(_require(payload, "total"), "total"),
            timestamp=_as_datetime(_require(payload, "timestamp")),
        )

    def _decode_product_created(self, payload: dict[str, Any]) -> ProductCreated:
        return ProductCreated(
            event_id=_as_event_id(_require(payload, "eventId")),
            product_id=_as_int(_require(payload, "productId"), "productId"),
            name=str(_require(payload, "name")),
            category=str(_require(payload, "category")),
            price=_as_decimal(_require(payload, "price"), "price"),
            stock=_as_int(_require(payload, "stock"), "stock"),
            timestamp=_as_datetime(_require(payload, "timestamp")),
        )

    def _decode_price_changed(self, payload: dict[str, Any]) -> PriceChanged:
        return PriceChanged(
            event_id=_as_event_id(_require(payload, "eventId")),
            product_id=_as_int(_require(payload, "productId"), "productId"),
            old_price=_as_decimal(_require(payload, "oldPrice"), "oldPrice"),
            new_price=_as_decimal(_require(payload, "newPrice"), "newPrice"),
            timestamp=_as_datetime(_require(payload, "timestamp")),
        )


def _require(payload: dict[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise MalformedEventError(f"Missing required field: {key}")
    return value


def _as_event_id(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedEventError(f"Invalid eventId: {value!r}")
    return value


def _as_int(value: Any, field: str) -> int:
    # bool is an int subclass and never a valid id or quantity
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedEventError(f"Field '{field}' must be an integer")
    if isinstance(value, float):
        # inf and nan are not integers either
        if not value.is_integer():
            raise MalformedEventError(f"Field '{field}' must be an integer")
        value = int(value)
    if not INT_MIN <= value <= INT_MAX:
        raise MalformedEventError(f"Field '{field}' is out of range: {value}")
    return value


def _optional_int(value: Any, field: str) -> int | None:
    return None if value is None else _as_int(value, field)


def _as_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool):
        raise MalformedEventError(f"Field '{field}' must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise MalformedEventError(f"Field '{field}' must be a number") from e
    if not amount.is_finite():
        raise MalformedEventError(f"Field '{field}' must be a finite number")
    if abs(amount) >= MONEY_LIMIT:
        raise MalformedEventError(f"Field '{field}' is out of range: {amount}")
    return amount


def _as_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as e:
        raise MalformedEventError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
