"""
Tests for cart models
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from cartstore.models import Cart, CartItem, ProductInfo, StockInfo


def make_item(product_id=1, amount=1, price=100):
    return CartItem(id=product_id, name=f"Product {product_id}", price=price, image_url="img", amount=amount)


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_create_cart_item(self):
        """Test creating a cart item normalizes price to Decimal."""
        item = make_item(price=179.9)

        assert item.price == Decimal("179.9")
        assert item.amount == 1

    @pytest.mark.parametrize("amount", [0, -3])
    def test_amount_must_be_positive(self, amount):
        """Test an item cannot exist with amount below one."""
        with pytest.raises(ValueError):
            make_item(amount=amount)

    def test_amount_must_be_int(self):
        """Test booleans and floats are rejected as amounts."""
        with pytest.raises(ValueError):
            make_item(amount=True)
        with pytest.raises(ValueError):
            make_item(amount=1.5)

    def test_subtotal(self):
        """Test subtotal for quantity."""
        item = make_item(price=19.99, amount=3)

        assert item.subtotal == Decimal("59.97")

    def test_with_amount_copies(self):
        """Test with_amount returns a new item and keeps the rest."""
        item = make_item(amount=1)
        updated = item.with_amount(4)

        assert item.amount == 1
        assert updated.amount == 4
        assert (updated.id, updated.name, updated.price, updated.image_url) == (
            item.id, item.name, item.price, item.image_url
        )

    def test_to_dict(self):
        """Test snapshot record keeps integers as integers."""
        data = make_item(product_id=7, price=100, amount=2).to_dict()

        assert data == {"id": 7, "name": "Product 7", "price": 100, "imageUrl": "img", "amount": 2}
        assert isinstance(data["price"], int)

    def test_from_dict_missing_field(self):
        """Test missing amount is rejected."""
        with pytest.raises(KeyError):
            CartItem.from_dict({"id": 1, "name": "x", "price": 1, "imageUrl": "y"})


class TestCart:
    """Tests for Cart dataclass."""

    def test_create_empty_cart(self):
        """Test creating an empty cart."""
        cart = Cart.empty()

        assert len(cart) == 0
        assert not cart
        assert cart.total_items == 0
        assert cart.subtotal == 0

    def test_duplicate_ids_rejected(self):
        """Test a cart cannot hold two entries for one product."""
        with pytest.raises(ValueError):
            Cart(items=[make_item(1), make_item(1, amount=2)])

    def test_with_item_appends(self):
        """Test new product goes to the end."""
        cart = Cart(items=[make_item(1)]).with_item(make_item(2))

        assert [item.id for item in cart] == [1, 2]

    def test_with_item_replaces_in_place(self):
        """Test existing product keeps its position."""
        cart = Cart(items=[make_item(1), make_item(2), make_item(3)])

        updated = cart.with_item(make_item(2, amount=5))

        assert [item.id for item in updated] == [1, 2, 3]
        assert updated.find(2).amount == 5
        assert cart.find(2).amount == 1

    def test_without(self):
        """Test removing one entry."""
        cart = Cart(items=[make_item(1), make_item(2)])

        assert [item.id for item in cart.without(1)] == [2]
        assert cart.without(99) == cart

    def test_lookup(self):
        """Test find, index_of and membership."""
        cart = Cart(items=[make_item(1), make_item(2)])

        assert cart.index_of(2) == 1
        assert cart.find(3) is None
        assert 1 in cart
        assert 3 not in cart

    def test_totals(self):
        """Test cart with multiple items."""
        cart = Cart(items=[make_item(1, amount=2, price=100), make_item(2, amount=1, price=200)])

        assert cart.total_items == 3
        assert cart.subtotal == Decimal("400.00")
        assert cart.amounts == {1: 2, 2: 1}


class TestStockInfo:
    """Tests for StockInfo model."""

    def test_valid(self):
        stock = StockInfo.model_validate({"id": 7, "amount": 3, "warehouse": "A"})

        assert stock.amount == 3

    def test_negative_amount(self):
        """Test negative stock is rejected."""
        with pytest.raises(ValidationError):
            StockInfo(id=7, amount=-1)


class TestProductInfo:
    """Tests for ProductInfo model."""

    def test_api_field_names(self):
        """Test title/image payload fields map to name/image_url."""
        product = ProductInfo.model_validate({"id": 7, "title": "Shoe", "price": 100, "image": "x"})

        assert product.name == "Shoe"
        assert product.image_url == "x"
        assert product.price == Decimal("100")

    def test_camel_case_fields(self):
        product = ProductInfo.model_validate({"id": 7, "name": "Shoe", "price": "99.90", "imageUrl": "x"})

        assert product.name == "Shoe"
        assert product.price == Decimal("99.90")

    def test_invalid_price(self):
        """Test a non-numeric price is rejected rather than read as zero."""
        with pytest.raises(ValidationError):
            ProductInfo.model_validate({"id": 7, "title": "Shoe", "price": "free", "image": "x"})

    def test_to_cart_item(self):
        """Test building a cart entry from catalog data."""
        product = ProductInfo.model_validate({"id": 7, "title": "Shoe", "price": 100, "image": "x"})

        item = product.to_cart_item()

        assert item == CartItem(id=7, name="Shoe", price=Decimal("100"), image_url="x", amount=1)
