"""Cart store: in-memory cart, snapshot persistence and stock-checked mutations."""
import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from .config import DEFAULT_STORAGE_KEY, Settings, load_settings
from .errors import (
    ERROR_ADD_PRODUCT,
    ERROR_REMOVE_PRODUCT,
    ERROR_UPDATE_AMOUNT,
    CartError,
    CartErrorKind,
    NotFoundError,
    OutOfStockError,
    ProductNotFoundError,
    SnapshotError,
    TransientFailureError,
)
from .logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from .models import Cart
from .notifier import LoggingNotifier, Notifier
from .services import CatalogApiClient, HttpProductCatalog, HttpStockService, ProductCatalog, StockService
from .snapshot import dump_cart, load_cart
from .storage import PersistentStore, build_store

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation."""
    ok: bool
    cart: Cart
    error: Optional[CartErrorKind] = None
    message: Optional[str] = None
    changed: bool = False

    def __bool__(self) -> bool:
        return self.ok


class CartStore:
    """
    Owns the cart and keeps its snapshot in sync.

    Features:
    - Bootstraps from the persisted snapshot (empty cart if absent or corrupt)
    - Validates every quantity increase against the stock service
    - Writes the snapshot before committing in memory, so storage and memory
      only ever move together
    - Serializes mutations with a per-store lock so a stock check is never
      separated from its commit by another mutation

    Operations never raise: on any stock, catalog, storage or input failure
    they notify the user once and return a failed CartResult with the cart
    unchanged.
    """

    def __init__(
        self,
        stock: StockService,
        catalog: ProductCatalog,
        storage: PersistentStore,
        notifier: Notifier,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self.stock = stock
        self.catalog = catalog
        self.storage = storage
        self.notifier = notifier
        self.storage_key = storage_key
        self._lock = asyncio.Lock()
        self._cart = self._read_snapshot()

    # ==================== STATE ====================

    def _read_snapshot(self) -> Cart:
        data = self.storage.read(self.storage_key)
        if not data:
            return Cart.empty()
        try:
            cart = load_cart(data)
        except SnapshotError as e:
            # Corrupted data - start empty, next commit overwrites it
            logger.warning(
                f"Ignoring corrupted cart snapshot under {self.storage_key}: "
                f"{sanitize_string_for_logging(str(e), max_length=200)}"
            )
            return Cart.empty()
        logger.info(f"Loaded cart snapshot with {len(cart)} item(s)")
        return cart

    @property
    def cart(self) -> Cart:
        return self._cart

    def get_cart(self) -> Cart:
        """Current cart (immutable; later mutations produce new Cart objects)."""
        return self._cart

    @property
    def amounts(self) -> Dict[int, int]:
        return self._cart.amounts

    @property
    def total_items(self) -> int:
        return self._cart.total_items

    @property
    def subtotal(self) -> Decimal:
        return self._cart.subtotal

    async def reload(self) -> Cart:
        """Re-read the snapshot from storage and make it the current cart."""
        async with self._lock:
            self._cart = self._read_snapshot()
            return self._cart

    # ==================== OPERATIONS ====================

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of product_id, creating the entry if needed."""
        return await self._mutate(
            lambda: self._add_product(product_id),
            ERROR_ADD_PRODUCT,
        )

    async def remove_product(self, product_id: int) -> CartResult:
        """Remove the entry for product_id."""
        return await self._mutate(
            lambda: self._remove_product(product_id),
            ERROR_REMOVE_PRODUCT,
        )

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """
        Set the exact amount of an existing entry.

        Amounts below one are ignored (no stock query, no write, no
        notification); callers decrementing past one should remove instead.
        Integral floats (2.0 from a number input) count as integers; any
        other non-integer amount fails with the update message.
        """
        is_number = isinstance(amount, (int, float)) and not isinstance(amount, bool)
        if is_number and amount < 1:
            logger.debug(f"Ignoring non-positive amount {amount} for product {sanitize_id_for_logging(product_id)}")
            return CartResult(ok=True, cart=self._cart)
        if isinstance(amount, float) and amount.is_integer():
            amount = int(amount)
        if not is_number or not isinstance(amount, int):
            logger.warning(
                f"Update failed: invalid amount {sanitize_string_for_logging(repr(amount))} "
                f"for product {sanitize_id_for_logging(product_id)}"
            )
            return self._fail(TransientFailureError(ERROR_UPDATE_AMOUNT))
        return await self._mutate(
            lambda: self._update_product_amount(product_id, amount),
            ERROR_UPDATE_AMOUNT,
        )

    async def aclose(self) -> None:
        """Close collaborators that hold network resources."""
        for collaborator in (self.stock, self.catalog):
            close = getattr(collaborator, "aclose", None)
            if close is not None:
                await close()

    # ==================== INTERNAL HELPERS ====================

    async def _mutate(self, build: Callable[[], Awaitable[Cart]], default_message: str) -> CartResult:
        async with self._lock:
            try:
                new_cart = await build()
                self._persist(new_cart, default_message)
            except CartError as e:
                return self._fail(e)
            except Exception as e:
                logger.error(f"Cart operation failed unexpectedly: {sanitize_string_for_logging(str(e))}", exc_info=True)
                return self._fail(TransientFailureError(default_message))
            self._cart = new_cart
            return CartResult(ok=True, cart=new_cart, changed=True)

    def _fail(self, error: CartError) -> CartResult:
        self._notify(error.message)
        return CartResult(ok=False, cart=self._cart, error=error.kind, message=error.message)

    async def _add_product(self, product_id: int) -> Cart:
        cart = self._cart
        existing = cart.find(product_id)
        stock = await self._lookup(self.stock.get, product_id, ERROR_ADD_PRODUCT)

        if existing is not None:
            amount = existing.amount + 1
            if stock.amount < amount:
                logger.warning(
                    f"Out of stock: product {sanitize_id_for_logging(product_id)} "
                    f"requested {amount}, available {stock.amount}"
                )
                raise OutOfStockError()
            logger.info(f"Cart: product {sanitize_id_for_logging(product_id)} amount {existing.amount} -> {amount}")
            return cart.with_item(existing.with_amount(amount))

        if stock.amount < 1:
            logger.warning(f"Out of stock: product {sanitize_id_for_logging(product_id)} unavailable")
            raise OutOfStockError()

        product = await self._lookup(self.catalog.get, product_id, ERROR_ADD_PRODUCT)
        if product.id != product_id:
            logger.error(f"Catalog returned product {product.id} for requested {sanitize_id_for_logging(product_id)}")
            raise TransientFailureError(ERROR_ADD_PRODUCT)
        logger.info(f"Cart: added product {sanitize_id_for_logging(product_id)}")
        return cart.with_item(product.to_cart_item(amount=1))

    async def _remove_product(self, product_id: int) -> Cart:
        if product_id not in self._cart:
            logger.warning(f"Remove failed: product {sanitize_id_for_logging(product_id)} not in cart")
            raise ProductNotFoundError(ERROR_REMOVE_PRODUCT)
        logger.info(f"Cart: removed product {sanitize_id_for_logging(product_id)}")
        return self._cart.without(product_id)

    async def _update_product_amount(self, product_id: int, amount: int) -> Cart:
        existing = self._cart.find(product_id)
        if existing is None:
            logger.warning(f"Update failed: product {sanitize_id_for_logging(product_id)} not in cart")
            raise ProductNotFoundError(ERROR_UPDATE_AMOUNT)

        stock = await self._lookup(self.stock.get, product_id, ERROR_UPDATE_AMOUNT)
        if stock.amount < amount:
            logger.warning(
                f"Out of stock: product {sanitize_id_for_logging(product_id)} "
                f"requested {amount}, available {stock.amount}"
            )
            raise OutOfStockError()

        logger.info(f"Cart: product {sanitize_id_for_logging(product_id)} amount {existing.amount} -> {amount}")
        return self._cart.with_item(existing.with_amount(amount))

    async def _lookup(self, fetch: Callable[[int], Awaitable[T]], product_id: int, message: str) -> T:
        """Call a stock/catalog lookup, classifying its failures."""
        try:
            return await fetch(product_id)
        except NotFoundError as e:
            logger.warning(f"Product {sanitize_id_for_logging(product_id)} not found: {sanitize_string_for_logging(str(e))}")
            raise ProductNotFoundError(message) from e
        except Exception as e:
            logger.error(f"Lookup for product {sanitize_id_for_logging(product_id)} failed: {sanitize_string_for_logging(str(e))}", exc_info=True)
            raise TransientFailureError(message) from e

    def _persist(self, cart: Cart, message: str) -> None:
        try:
            self.storage.write(self.storage_key, dump_cart(cart))
        except Exception as e:
            logger.error(f"Failed to persist cart snapshot: {sanitize_string_for_logging(str(e))}", exc_info=True)
            raise TransientFailureError(message) from e

    def _notify(self, message: str) -> None:
        try:
            self.notifier.notify(message)
        except Exception:
            logger.error(f"Notifier failed for message: {sanitize_string_for_logging(message)}", exc_info=True)


def create_cart_store(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    stock: Optional[StockService] = None,
    catalog: Optional[ProductCatalog] = None,
    storage: Optional[PersistentStore] = None,
) -> CartStore:
    """
    Build a CartStore wired to the HTTP services and configured storage.

    Collaborators passed explicitly replace the defaults built from settings.
    """
    settings = settings or load_settings()
    api_client = CatalogApiClient.from_settings(settings)
    return CartStore(
        stock=stock or HttpStockService(api_client),
        catalog=catalog or HttpProductCatalog(api_client),
        storage=storage if storage is not None else build_store(settings),
        notifier=notifier or LoggingNotifier(),
        storage_key=settings.storage_key,
    )


# Singleton instance
_cart_store: Optional[CartStore] = None


def get_cart_store() -> CartStore:
    """Get CartStore singleton configured from the environment."""
    global _cart_store
    if _cart_store is None:
        _cart_store = create_cart_store()
    return _cart_store
