"""
On-disk layout of a mask discovery run.

    experiments/latent-mask/<category>/<run_id>/
        base.jpg
        variant_00.jpg ...
        embeddings.json     {"base": [...], "variant_00.jpg": [...]}
        run.json            manifest

A dry run writes only run.json.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.logging import get_logger
from core.utils import atomic_write_json
from masks.base_selection import BaseProduct
from masks.discovery import DiscoveryResult
from masks.models import VarianceMask


logger = get_logger(__name__)


def variant_filename(index: int) -> str:
    return f"variant_{index:02d}.jpg"


def run_directory(experiments_dir: Path, category: str, run_id: str) -> Path:
    return Path(experiments_dir) / category / run_id


def _relative(path: Path, root: Path) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def with_experiment_dir(mask: VarianceMask, out_dir: Path, repo_root: Path) -> VarianceMask:
    """Copy of `mask` recording where its run output lives, relative to `repo_root`."""
    return mask.model_copy(update={"experiment_dir": _relative(out_dir, repo_root)})


def write_dry_run(
    out_dir: Path,
    repo_root: Path,
    category: str,
    run_id: str,
    base: BaseProduct,
    prompts: List[str],
) -> Path:
    """Record what a real run would produce, without calling any external service."""
    rel_out = _relative(out_dir, repo_root)
    manifest = {
        "category": category,
        "runId": run_id,
        "baseProductId": base.id,
        "baseImagePath": base.image_path,
        "experimentDir": rel_out,
        "variants": len(prompts),
        "prompts": prompts,
        "variantImagePaths": [f"{rel_out}/{variant_filename(i)}" for i in range(len(prompts))],
        "dryRun": True,
    }
    path = out_dir / "run.json"
    atomic_write_json(path, manifest)
    logger.info("Dry run manifest written", category=category, path=str(path))
    return path


def write_run(
    result: DiscoveryResult,
    out_dir: Path,
    repo_root: Path,
    mask_path: Optional[Path] = None,
) -> Path:
    """Save base/variant images, embeddings and the run manifest."""
    out_dir.mkdir(parents=True, exist_ok=True)
    rel_out = _relative(out_dir, repo_root)
    mask = result.mask

    (out_dir / "base.jpg").write_bytes(result.base.absolute_image_path.read_bytes())

    embeddings: Dict[str, Any] = {}
    if result.base_embedding is not None:
        embeddings["base"] = result.base_embedding

    variant_paths: List[Optional[str]] = []
    for outcome in result.outcomes:
        if outcome.image is None:
            variant_paths.append(None)
            continue
        name = variant_filename(outcome.index)
        (out_dir / name).write_bytes(outcome.image.content)
        variant_paths.append(f"{rel_out}/{name}")
        if outcome.embedding is not None:
            embeddings[name] = outcome.embedding

    atomic_write_json(out_dir / "embeddings.json", embeddings)

    manifest = {
        "category": mask.category,
        "runId": mask.run_id,
        "baseProductId": mask.base_product_id,
        "baseImagePath": result.base.image_path,
        "experimentDir": rel_out,
        "variants": mask.params.variants,
        "prompts": [o.prompt for o in result.outcomes],
        "variantImagePaths": variant_paths,
        "failedVariants": mask.failed_variants,
        "errors": {variant_filename(o.index): o.error for o in result.outcomes if o.error},
        "maskPath": _relative(mask_path, repo_root) if mask_path else None,
        "params": mask.params.model_dump(by_alias=True),
        "topK": mask.top_k,
        "dryRun": False,
    }
    path = out_dir / "run.json"
    atomic_write_json(path, manifest)
    logger.info("Run written", category=mask.category, run_id=mask.run_id, path=str(out_dir))
    return path
