"""
Variance-mask discovery pipeline.

For one category:
1. Select a base product (model shot / eyeglasses, image on disk)
2. Generate N prompted variants of its image (external, fallible)
3. Embed the base image and each variant (external, fallible)
4. Compute per-dimension variance and turn it into a weight mask

Variant generation and embedding run concurrently through a bounded
thread pool. A failed variant is recorded and skipped; the run only fails
when no embedding at all succeeded. Nothing is written to disk here.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from core.logging import LoggerMixin
from core.utils import run_id_from_now
from masks.base_selection import BaseProduct, select_base_product
from masks.mask_builder import build_weights_from_variance
from masks.models import MaskParams, VarianceMask, VariantRecord
from masks.prompts import plan_variant_prompts
from masks.variance import compute_variance_per_dim
from recs.models import Product


class MaskDiscoveryError(RuntimeError):
    """Raised when a discovery run produced no usable embeddings."""


@dataclass(frozen=True)
class GeneratedImage:
    url: str
    content: bytes = field(repr=False)


class ImageGenerator(Protocol):
    def edit_image(self, prompt: str, image_bytes: bytes) -> GeneratedImage: ...


class ImageEmbedder(Protocol):
    def embed_image(self, image_bytes: bytes) -> List[float]: ...


@dataclass
class VariantOutcome:
    """Per-variant result, including the image bytes for callers that persist them."""
    index: int
    prompt: str
    image: Optional[GeneratedImage] = None
    embedding: Optional[List[float]] = None
    error: Optional[str] = None

    def to_record(self) -> VariantRecord:
        return VariantRecord(
            index=self.index,
            prompt=self.prompt,
            image_reference=self.image.url if self.image else None,
            error=self.error,
        )


@dataclass
class DiscoveryResult:
    """Mask plus the raw material a caller may want to save."""
    mask: VarianceMask
    base: BaseProduct
    base_embedding: Optional[List[float]]
    outcomes: List[VariantOutcome]


class MaskDiscoveryPipeline(LoggerMixin):
    """
    Runs mask discovery against injected generator/embedder collaborators.

    Usage:
        client = ReplicateClient()
        pipeline = MaskDiscoveryPipeline(client, client, products, metadata, image_root=Path("."))
        mask = pipeline.discover_mask("apparel", variant_count=8)
    """

    def __init__(
        self,
        generator: ImageGenerator,
        embedder: ImageEmbedder,
        products: Sequence[Product],
        metadata: Mapping[str, Mapping[str, Any]],
        image_root: Path,
        max_workers: int = 3,
    ) -> None:
        self._generator = generator
        self._embedder = embedder
        self._products = list(products)
        self._metadata = metadata
        self._image_root = Path(image_root)
        self._max_workers = max(1, max_workers)

    def discover_mask(
        self,
        category: str,
        base_product_id: Optional[str] = None,
        variant_count: int = 8,
        percentile: float = 0.2,
        high_weight: float = 1.0,
        low_weight: float = 0.1,
    ) -> VarianceMask:
        return self.run(
            category,
            base_product_id=base_product_id,
            variant_count=variant_count,
            percentile=percentile,
            high_weight=high_weight,
            low_weight=low_weight,
        ).mask

    def run(
        self,
        category: str,
        base_product_id: Optional[str] = None,
        variant_count: int = 8,
        percentile: float = 0.2,
        high_weight: float = 1.0,
        low_weight: float = 0.1,
        run_id: Optional[str] = None,
    ) -> DiscoveryResult:
        """Like discover_mask, but also returns base/variant images and embeddings."""
        if variant_count < 0:
            raise ValueError(f"variant_count must be >= 0, got {variant_count}")

        base = select_base_product(
            category, self._products, self._metadata, self._image_root, base_product_id
        )
        base_bytes = base.absolute_image_path.read_bytes()
        prompts = plan_variant_prompts(category, variant_count)
        run_id = run_id or run_id_from_now()

        self.logger.info(
            "Starting mask discovery",
            category=category,
            base_product_id=base.id,
            variants=variant_count,
            run_id=run_id,
        )

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            base_future = executor.submit(self._embed_base, base_bytes)
            variant_futures = [
                executor.submit(self._process_variant, i, prompt, base_bytes)
                for i, prompt in enumerate(prompts)
            ]
            outcomes = [f.result() for f in variant_futures]
            base_embedding = base_future.result()

        vectors: List[List[float]] = []
        if base_embedding is not None:
            vectors.append(base_embedding)
        vectors.extend(o.embedding for o in outcomes if o.embedding is not None)

        failed = sum(1 for o in outcomes if o.error is not None)
        if not vectors:
            raise MaskDiscoveryError(
                f"No embeddings succeeded for category={category} ({failed} variant failures)"
            )

        variance = compute_variance_per_dim(vectors)
        mask_weights = build_weights_from_variance(variance, percentile, high_weight, low_weight)

        mask = VarianceMask(
            category=category,
            base_product_id=base.id,
            run_id=run_id,
            params=MaskParams(
                variants=variant_count,
                percentile=percentile,
                high_weight=high_weight,
                low_weight=low_weight,
            ),
            variants=[o.to_record() for o in outcomes],
            failed_variants=failed,
            variance=variance,
            embedding_dim=len(variance),
            top_k=mask_weights.top_k,
            top_dims=mask_weights.top_dims,
            weights=mask_weights.weights,
        )

        self.logger.info(
            "Mask discovery complete",
            category=category,
            vectors=len(vectors),
            failed_variants=failed,
            base_embedded=base_embedding is not None,
            top_k=mask.top_k,
        )
        return DiscoveryResult(mask=mask, base=base, base_embedding=base_embedding, outcomes=outcomes)

    def _embed_base(self, image_bytes: bytes) -> Optional[List[float]]:
        try:
            return list(self._embedder.embed_image(image_bytes))
        except Exception as e:
            self.logger.warning("Base image embedding failed", error=str(e), error_type=type(e).__name__)
            return None

    def _process_variant(self, index: int, prompt: str, base_bytes: bytes) -> VariantOutcome:
        outcome = VariantOutcome(index=index, prompt=prompt)
        try:
            outcome.image = self._generator.edit_image(prompt, base_bytes)
            outcome.embedding = list(self._embedder.embed_image(outcome.image.content))
        except Exception as e:
            outcome.error = f"{type(e).__name__}: {e}"
            self.logger.warning("Variant failed", index=index, error=outcome.error)
        return outcome
