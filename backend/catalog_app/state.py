# Overview: Per-application in-memory cache of catalog, images, inventory and pending rows.

"""
Application state.

Every collection is replaced by reference assignment, never mutated in
place, so a concurrent reader sees either the old or the new list. The
catalog, image and inventory maps are refreshed independently and are not
consistent with each other across a refresh.
"""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional

from .models import ImageEntry, InventoryRecord, PendingProduct, Product


def normalize_sku(sku: str | None) -> str:
    return (sku or "").strip().upper()


def image_url_for(sku: str) -> str:
    return f"/api/images/{sku}"


class CatalogState:
    def __init__(self):
        self.products: list[Product] = []
        self.image_map: dict[str, ImageEntry] = {}
        self.inventory_map: dict[str, list[InventoryRecord]] = {}
        self.pending: list[PendingProduct] = []
        self.last_refresh_time: Optional[datetime] = None
        self._refresh_lock = threading.Lock()

    # -- joins -----------------------------------------------------------

    def join(self, product: Product) -> Product:
        """Return a copy of product with image_url and inventory from the current maps."""
        image = self.image_map.get(product.sku)
        return replace(
            product,
            image_url=image_url_for(product.sku) if image else None,
            inventory=list(self.inventory_map.get(product.sku, [])),
        )

    def rejoin_products(self) -> None:
        self.products = [self.join(p) for p in self.products]

    # -- replace operations ---------------------------------------------

    def replace_products(self, products: list[Product]) -> None:
        self.products = [self.join(p) for p in products]

    def replace_images(self, image_map: dict[str, ImageEntry]) -> None:
        self.image_map = image_map

    def replace_inventory(self, inventory_map: dict[str, list[InventoryRecord]]) -> None:
        self.inventory_map = inventory_map

    def replace_pending(self, pending: list[PendingProduct]) -> None:
        self.pending = pending

    # -- lookups ---------------------------------------------------------

    def find_product(self, sku: str) -> Optional[Product]:
        key = normalize_sku(sku)
        if not key:
            return None
        for p in self.products:
            if normalize_sku(p.sku) == key:
                return p
        return None

    def find_pending(self, sku: str) -> Optional[PendingProduct]:
        key = normalize_sku(sku)
        if not key:
            return None
        for p in self.pending:
            if normalize_sku(p.sku) == key:
                return p
        return None

    # -- single-record updates ------------------------------------------

    def add_pending(self, record: PendingProduct) -> None:
        self.pending = [*self.pending, record]

    def remove_pending(self, sku: str) -> None:
        key = normalize_sku(sku)
        self.pending = [p for p in self.pending if normalize_sku(p.sku) != key]

    def add_product(self, product: Product) -> Product:
        joined = self.join(product)
        self.products = sorted([*self.products, joined], key=lambda p: p.sku.lower())
        return joined

    # -- refresh flag ----------------------------------------------------

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    def try_begin_refresh(self) -> bool:
        return self._refresh_lock.acquire(blocking=False)

    def end_refresh(self) -> None:
        self._refresh_lock.release()

    def counts(self) -> dict:
        return {
            "productsCount": len(self.products),
            "imagesCount": len(self.image_map),
            "inventoryCount": len(self.inventory_map),
            "pendingCount": len(self.pending),
        }
