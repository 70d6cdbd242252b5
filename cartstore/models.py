"""Cart models: immutable cart state plus the payloads of the stock and product APIs."""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .money import multiply, parse_price, round_money, to_decimal, to_json_number


@dataclass(frozen=True)
class CartItem:
    """One distinct product in the cart and its requested quantity."""
    id: int
    name: str
    price: Decimal
    image_url: str
    amount: int

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise ValueError(f"id must be an integer, got {self.id!r}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"amount must be an integer, got {self.amount!r}")
        if self.amount < 1:
            raise ValueError(f"amount must be >= 1, got {self.amount}")
        object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def subtotal(self) -> Decimal:
        """Price for all units of this item."""
        return round_money(multiply(self.price, self.amount))

    def with_amount(self, amount: int) -> "CartItem":
        """Copy of this item with a different amount."""
        return replace(self, amount=amount)

    def to_dict(self) -> dict:
        """Snapshot record for this item."""
        return {
            "id": self.id,
            "name": self.name,
            "price": to_json_number(self.price),
            "imageUrl": self.image_url,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """
        Rebuild an item from a snapshot record.

        Raises:
            KeyError: if a field is missing
            ValueError: if a field has the wrong type or range
        """
        return cls(
            id=data["id"],
            name=str(data["name"]),
            price=parse_price(data["price"]),
            image_url=str(data["imageUrl"]),
            amount=data["amount"],
        )


@dataclass(frozen=True)
class Cart:
    """
    Ordered, id-unique sequence of cart items.

    Every modifier returns a new Cart; an instance handed out to a consumer
    never changes underneath it.
    """
    items: Tuple[CartItem, ...] = field(default_factory=tuple)

    def __post_init__(self):
        items = tuple(self.items)
        seen = set()
        for item in items:
            if item.id in seen:
                raise ValueError(f"duplicate product id in cart: {item.id}")
            seen.add(item.id)
        object.__setattr__(self, "items", items)

    @classmethod
    def empty(cls) -> "Cart":
        return cls(items=())

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __contains__(self, product_id: object) -> bool:
        return self.index_of(product_id) is not None

    def index_of(self, product_id: object) -> Optional[int]:
        for index, item in enumerate(self.items):
            if item.id == product_id:
                return index
        return None

    def find(self, product_id: object) -> Optional[CartItem]:
        index = self.index_of(product_id)
        return None if index is None else self.items[index]

    def with_item(self, item: CartItem) -> "Cart":
        """Replace the entry with the same id in place, or append a new one."""
        index = self.index_of(item.id)
        if index is None:
            return Cart(items=self.items + (item,))
        return Cart(items=self.items[:index] + (item,) + self.items[index + 1:])

    def without(self, product_id: int) -> "Cart":
        """Cart minus the entry for product_id (unchanged copy if absent)."""
        return Cart(items=tuple(item for item in self.items if item.id != product_id))

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(item.amount for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of item subtotals."""
        return round_money(sum((item.subtotal for item in self.items), Decimal("0")))

    @property
    def amounts(self) -> Dict[int, int]:
        """Product id -> amount, in cart order."""
        return {item.id: item.amount for item in self.items}

    def to_list(self) -> list:
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, records: Iterable[dict]) -> "Cart":
        return cls(items=tuple(CartItem.from_dict(record) for record in records))


class StockInfo(BaseModel):
    """Stock API payload: units currently purchasable."""
    id: int
    amount: int

    class Config:
        extra = "ignore"

    @field_validator("amount")
    @classmethod
    def amount_not_negative(cls, v):
        if v < 0:
            raise ValueError("stock amount must be >= 0")
        return v


class ProductInfo(BaseModel):
    """Product API payload: display metadata for a product."""
    id: int
    name: str = Field(validation_alias=AliasChoices("name", "title"))
    price: Decimal
    image_url: str = Field(validation_alias=AliasChoices("image_url", "imageUrl", "image"))

    class Config:
        extra = "ignore"

    @field_validator("price", mode="before")
    @classmethod
    def convert_price(cls, v):
        return parse_price(v)

    def to_cart_item(self, amount: int = 1) -> CartItem:
        return CartItem(
            id=self.id,
            name=self.name,
            price=self.price,
            image_url=self.image_url,
            amount=amount,
        )
