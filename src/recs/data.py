"""
File-backed data repository.

Reads the catalog (products.yaml), product metadata (products_metadata.yaml),
embeddings (embeddings.json) and per-category masks (masks/<category>_mask.json).
Every call reads fresh from disk; nothing is cached between calls.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import yaml
from pydantic import ValidationError

from config.settings import Settings
from core.logging import get_logger
from core.utils import atomic_write_json
from masks.models import VarianceMask
from recs.models import Category, Product


logger = get_logger(__name__)


class DataFileError(RuntimeError):
    """Raised when a required data file is missing or malformed."""


def _default_category(product_id: str) -> str:
    return Category.EYEWEAR.value if product_id.startswith("e") else Category.APPAREL.value


class DataRepository:
    """Read-only snapshot access to catalog data, plus mask persistence."""

    def __init__(
        self,
        base_dir: Path,
        products_file: str = "products.yaml",
        metadata_file: str = "products_metadata.yaml",
        embeddings_file: str = "embeddings.json",
        masks_dir: str = "masks",
    ) -> None:
        self.base_dir = Path(base_dir)
        self.products_path = self.base_dir / products_file
        self.metadata_path = self.base_dir / metadata_file
        self.embeddings_path = self.base_dir / embeddings_file
        self.masks_dir = self.base_dir / masks_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataRepository":
        return cls(
            base_dir=settings.base_dir,
            products_file=settings.products_file,
            metadata_file=settings.metadata_file,
            embeddings_file=settings.embeddings_file,
            masks_dir=settings.masks_dir_name,
        )

    # =========================================================================
    # Catalog
    # =========================================================================

    def load_catalog(self) -> List[Product]:
        raw = self._read_yaml(self.products_path, required=True)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise DataFileError(f"{self.products_path} must be a YAML array")

        products: List[Product] = []
        for entry in raw:
            if not isinstance(entry, dict) or not entry.get("id"):
                raise DataFileError(f"Catalog entry without an id in {self.products_path}: {entry!r}")
            data = dict(entry)
            data["id"] = str(data["id"])
            data.setdefault("category", _default_category(data["id"]))
            try:
                products.append(Product.model_validate(data))
            except ValidationError as e:
                raise DataFileError(f"Invalid catalog entry {data['id']}: {e}") from e
        return products

    def load_metadata(self) -> Dict[str, Dict[str, Any]]:
        raw = self._read_yaml(self.metadata_path, required=False)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise DataFileError(f"{self.metadata_path} must be a YAML object")
        return {str(k): dict(v or {}) for k, v in raw.items()}

    # =========================================================================
    # Embeddings
    # =========================================================================

    def load_embeddings(self) -> Dict[str, np.ndarray]:
        if not self.embeddings_path.exists():
            raise DataFileError(f"Embeddings file not found: {self.embeddings_path}")
        try:
            with self.embeddings_path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataFileError(f"Could not read {self.embeddings_path}: {e}") from e
        if not isinstance(raw, dict):
            raise DataFileError(f"{self.embeddings_path} must map product ids to vectors")

        return {str(pid): np.asarray(vec, dtype=np.float64) for pid, vec in raw.items()}

    # =========================================================================
    # Masks
    # =========================================================================

    def mask_path(self, category: str) -> Path:
        return self.masks_dir / f"{category}_mask.json"

    def load_mask(self, category: str) -> Optional[VarianceMask]:
        path = self.mask_path(category)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return VarianceMask.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable mask", category=category, path=str(path), error=str(e))
            return None

    def save_mask(self, mask: VarianceMask) -> Path:
        path = self.mask_path(mask.category)
        atomic_write_json(path, mask.to_artifact())
        logger.info("Saved mask", category=mask.category, path=str(path))
        return path

    # =========================================================================
    # Helpers
    # =========================================================================

    def _read_yaml(self, path: Path, required: bool) -> Any:
        if not path.exists():
            if required:
                raise DataFileError(f"Data file not found: {path}")
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise DataFileError(f"Could not read {path}: {e}") from e
