"""Catalog and cart state.

The catalog is the only owner of ``Product`` records. The cart is an ordered
list of product ids that points into the catalog, so cart membership and the
``selected`` flag are always read from the same record.

Invariant: a product is ``selected`` exactly when its id is in the cart.
``clear_basket`` is the one exception; callers follow it with
``reset_selected`` once an order has gone through.
"""

from typing import Any, Iterable, Mapping

import structlog

from storefront.bus import topics
from storefront.bus.event_bus import EventBus
from storefront.bus.events import BasketChanged, BasketLine, BasketView, CatalogChanged, PreviewChanged
from storefront.catalog.product import Product
from storefront.exceptions import ProductNotFoundError
from storefront.model.observable import ObservableModel

logger = structlog.get_logger(__name__)


class CatalogState(ObservableModel):
    assignable = ("preview",)

    def __init__(self, bus: EventBus):
        self.items: list[Product] = []
        self.basket: list[str] = []
        self.preview: str | None = None
        self._index: dict[str, Product] = {}
        super().__init__(bus)

    # -------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------
    def set_catalog(self, items: Iterable[Mapping[str, Any] | Product]) -> None:
        """Replace the catalog wholesale with ``items``.

        Cart entries whose product disappeared from the new catalog are
        dropped; the remaining ones are re-marked as selected on the new
        records.
        """
        products = [item if isinstance(item, Product) else Product.model_validate(item) for item in items]

        index = {}
        for product in products:
            if product.id in index:
                logger.warning("Duplicate product id in catalog", product_id=product.id)
            index[product.id] = product

        self.items = products
        self._index = index

        kept = [product_id for product_id in self.basket if product_id in index]
        basket_changed = len(kept) != len(self.basket)
        self.basket = kept
        for product_id in kept:
            index[product_id].selected = True
        if self.preview is not None and self.preview not in index:
            self.preview = None

        logger.info("Catalog replaced", product_count=len(products), basket_count=len(kept))
        self.notify(topics.CATALOG_CHANGED, CatalogChanged(items=self.items))
        if basket_changed:
            self.notify(topics.BASKET_CHANGED, self.basket_snapshot())

    def get_product(self, product_id: str) -> Product:
        try:
            return self._index[product_id]
        except KeyError:
            raise ProductNotFoundError(product_id) from None

    def set_preview(self, product_id: str) -> Product:
        """Mark ``product_id`` as the product being inspected and announce it."""
        product = self.get_product(product_id)
        self.assign({"preview": product.id})
        self.notify(topics.PREVIEW_CHANGED, PreviewChanged(product=product, in_basket=self.is_in_basket(product.id)))
        return product

    def reset_selected(self) -> None:
        for product in self.items:
            product.selected = False

    # -------------------------------------------------------------------
    # Basket
    # -------------------------------------------------------------------
    def add_to_basket(self, product: Product | str) -> bool:
        """Put a product in the cart. Re-adding a product already there is a no-op.

        Returns whether the cart changed.
        """
        product_id = product.id if isinstance(product, Product) else product
        record = self.get_product(product_id)
        if product_id in self.basket:
            logger.debug("Product already in basket", product_id=product_id)
            return False

        record.selected = True
        self.basket.append(product_id)
        self.notify(topics.BASKET_CHANGED, self.basket_snapshot())
        return True

    def delete_from_basket(self, product_id: str) -> bool:
        """Take a product out of the cart and clear its selected flag.

        Ids that are not in the cart are ignored. Returns whether the cart changed.
        """
        if product_id not in self.basket:
            return False

        self.basket.remove(product_id)
        record = self._index.get(product_id)
        if record is not None:
            record.selected = False
        self.notify(topics.BASKET_CHANGED, self.basket_snapshot())
        return True

    def clear_basket(self) -> None:
        self.basket.clear()
        self.notify(topics.BASKET_CHANGED, self.basket_snapshot())

    def is_in_basket(self, product_id: str) -> bool:
        return product_id in self.basket

    def basket_items(self) -> list[Product]:
        return [self._index[product_id] for product_id in self.basket]

    def get_basket_count(self) -> int:
        return len(self.basket)

    def get_basket_total(self) -> float:
        """Sum of cart prices; priceless products count as 0."""
        return sum((product.price for product in self.basket_items() if product.price is not None), 0)

    def basket_snapshot(self) -> BasketChanged:
        return BasketChanged(
            count=self.get_basket_count(),
            total=self.get_basket_total(),
            items=list(self.basket),
        )

    def basket_view(self) -> BasketView:
        lines = [
            BasketLine(index=position, product_id=product.id, title=product.title, price=product.price)
            for position, product in enumerate(self.basket_items(), start=1)
        ]
        return BasketView(lines=lines, total=self.get_basket_total())
