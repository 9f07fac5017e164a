"""
Pydantic models for variance-mask artifacts.

The JSON layout uses camelCase keys (baseProductId, topK, topDims, ...)
so masks written by earlier tooling load unchanged.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TopDim(_CamelModel):
    """One high-variance dimension kept for inspection."""
    i: int
    variance: float


class MaskParams(_CamelModel):
    variants: int
    percentile: float
    high_weight: float
    low_weight: float


class VariantRecord(_CamelModel):
    """Outcome of generating and embedding one variant."""
    index: int
    prompt: str
    image_reference: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class VarianceMask(_CamelModel):
    """Per-category dimension weights derived from variant embeddings."""

    category: str
    base_product_id: str
    run_id: Optional[str] = None
    experiment_dir: Optional[str] = None
    params: MaskParams
    variants: List[VariantRecord] = Field(default_factory=list)
    failed_variants: int = 0
    variance: List[float] = Field(default_factory=list)
    embedding_dim: Optional[int] = None
    top_k: int
    top_dims: List[TopDim] = Field(default_factory=list)
    weights: List[float]

    @model_validator(mode="after")
    def _check_dimensions(self) -> "VarianceMask":
        if self.embedding_dim is None:
            self.embedding_dim = len(self.weights)
        if len(self.weights) != self.embedding_dim:
            raise ValueError(
                f"weights length {len(self.weights)} does not match embedding_dim {self.embedding_dim}"
            )
        if self.variance and len(self.variance) != self.embedding_dim:
            raise ValueError(
                f"variance length {len(self.variance)} does not match embedding_dim {self.embedding_dim}"
            )
        return self

    def to_artifact(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
