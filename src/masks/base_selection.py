"""
Base product selection for mask discovery.

The base image must show the attribute being perturbed on a person:
apparel needs a model shot (not a flat-lay), eyewear needs eyeglasses
(not sunglasses, whose lenses hide the face). An explicitly requested
base id is never silently replaced by another product.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from recs.models import Category, Product


class BaseProductSelectionError(LookupError):
    """Raised when no usable base product exists for a discovery run."""


@dataclass(frozen=True)
class BaseProduct:
    id: str
    image_path: str
    absolute_image_path: Path
    metadata: Dict[str, Any] = field(default_factory=dict)


def meets_category_criteria(category: str, metadata: Mapping[str, Any]) -> bool:
    if category == Category.APPAREL.value:
        return str(metadata.get("presentation") or "").lower() == "model"
    if category == Category.EYEWEAR.value:
        return str(metadata.get("eyewearType") or "") == "eyeglasses"
    return True


def select_base_product(
    category: str,
    products: Sequence[Product],
    metadata: Mapping[str, Mapping[str, Any]],
    image_root: Path,
    base_product_id: Optional[str] = None,
) -> BaseProduct:
    if base_product_id:
        candidates = [p for p in products if p.id == base_product_id]
    else:
        candidates = [p for p in products if p.category == category]

    if not candidates:
        suffix = f" baseId={base_product_id}" if base_product_id else ""
        raise BaseProductSelectionError(f"No products found for category={category}{suffix}")

    for product in candidates:
        if not product.image_path:
            continue
        meta = dict(metadata.get(product.id) or {})
        if not meets_category_criteria(category, meta):
            continue
        abs_path = Path(image_root).joinpath(*product.image_path.split("/"))
        if not abs_path.is_file():
            continue
        return BaseProduct(
            id=product.id,
            image_path=product.image_path,
            absolute_image_path=abs_path,
            metadata=meta,
        )

    if base_product_id:
        raise BaseProductSelectionError(
            f"Base id {base_product_id} did not meet selection criteria or image was missing"
        )
    raise BaseProductSelectionError(f"No suitable base product found for category={category}")
