# Overview: In-memory records for catalog products, inventory, images and pending submissions.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .time_utils import to_utc_z

PENDING_STATUS = "pending"


@dataclass
class InventoryRecord:
    location: str
    on_hand: int = 0
    reserved: int = 0
    available: int = 0

    def to_dict(self) -> dict:
        return {
            "location": self.location,
            "onHand": self.on_hand,
            "reserved": self.reserved,
            "available": self.available,
        }


@dataclass(frozen=True)
class ImageEntry:
    sku: str
    file_id: str
    name: str

    @property
    def extension(self) -> str:
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].lower()


@dataclass
class Product:
    """
    One catalog row joined with its inventory records and image presence.

    image_url and inventory are derived; see CatalogState.join.
    """
    sku: str
    brand: str = ""
    name: str = ""
    category: str = ""
    sub_category: str = ""
    stock: Optional[str] = None
    price: Optional[str] = None
    image_url: Optional[str] = None
    inventory: list[InventoryRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "brand": self.brand,
            "name": self.name,
            "category": self.category,
            "subCategory": self.sub_category,
            "imageUrl": self.image_url,
            "inventory": [rec.to_dict() for rec in self.inventory],
            "stock": self.stock,
            "price": self.price,
        }


@dataclass
class PendingProduct:
    sku: str
    brand: str
    product_name: str
    category: str = ""
    sub_category: str = ""
    size: str = ""
    color: str = ""
    submitted_by: str = ""
    submitted_at: Optional[datetime] = None
    status: str = PENDING_STATUS

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "brand": self.brand,
            "productName": self.product_name,
            "category": self.category,
            "subCategory": self.sub_category,
            "size": self.size,
            "color": self.color,
            "submittedBy": self.submitted_by,
            "submittedAt": to_utc_z(self.submitted_at),
            "status": self.status,
        }

    def to_sheet_row(self) -> list[str]:
        """Cell values in PENDING_COLUMNS order."""
        return [
            self.sku,
            self.brand,
            self.product_name,
            self.category,
            self.sub_category,
            self.size,
            self.color,
            self.submitted_by,
            to_utc_z(self.submitted_at) or "",
            self.status,
        ]


# Header of the item_pending sheet
PENDING_COLUMNS = [
    "SKU",
    "Brand",
    "ProductName",
    "Category",
    "SubCategory",
    "Size",
    "Color",
    "SubmittedBy",
    "SubmittedAt",
    "Status",
]
