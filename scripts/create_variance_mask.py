#!/usr/bin/env python3
"""
Discover a variance mask for one or more categories.

Generates prompted variants of a base product image, embeds base + variants,
and writes masks/<category>_mask.json plus an experiment directory.

Usage:
    python scripts/create_variance_mask.py --category both
    python scripts/create_variance_mask.py --category eyewear --variants 5 --dry-run
    python scripts/create_variance_mask.py --category apparel --base-id-apparel a12 --percentile 0.1
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv  # noqa: E402

from config.settings import get_settings  # noqa: E402
from core.logging import bound_context, configure_logging, get_logger  # noqa: E402
from core.utils import run_id_from_now  # noqa: E402
from masks.base_selection import BaseProductSelectionError, select_base_product  # noqa: E402
from masks.discovery import MaskDiscoveryError, MaskDiscoveryPipeline  # noqa: E402
from masks.experiment import run_directory, with_experiment_dir, write_dry_run, write_run  # noqa: E402
from masks.prompts import plan_variant_prompts  # noqa: E402
from masks.replicate_client import ReplicateClient  # noqa: E402
from recs.data import DataFileError, DataRepository  # noqa: E402


logger = get_logger("create_variance_mask")


def run_category(args, settings, repository: DataRepository, category: str) -> None:
    base_id = getattr(args, f"base_id_{category}", None)
    products = repository.load_catalog()
    metadata = repository.load_metadata()
    run_id = run_id_from_now()
    out_dir = run_directory(settings.experiments_dir, category, run_id)

    if args.dry_run:
        base = select_base_product(category, products, metadata, settings.base_dir, base_id)
        write_dry_run(
            out_dir,
            settings.base_dir,
            category,
            run_id,
            base,
            plan_variant_prompts(category, args.variants),
        )
        return

    client = ReplicateClient(settings)
    pipeline = MaskDiscoveryPipeline(
        client,
        client,
        products,
        metadata,
        image_root=settings.base_dir,
        max_workers=args.workers,
    )
    result = pipeline.run(
        category,
        base_product_id=base_id,
        variant_count=args.variants,
        percentile=args.percentile,
        high_weight=args.high_weight,
        low_weight=args.low_weight,
        run_id=run_id,
    )
    result.mask = with_experiment_dir(result.mask, out_dir, settings.base_dir)
    mask_path = repository.save_mask(result.mask)
    write_run(result, out_dir, settings.base_dir, mask_path)
    print(f"[{category}] Wrote {mask_path} (topK={result.mask.top_k}, failed={result.mask.failed_variants})")


def main():
    load_dotenv()
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Discover per-category variance masks")
    parser.add_argument(
        "--category",
        default="both",
        choices=[*settings.categories, "both"],
        help="Category to process (default: both)",
    )
    for category in settings.categories:
        parser.add_argument(
            f"--base-id-{category}",
            dest=f"base_id_{category}",
            default=None,
            help=f"Force a specific {category} base product id",
        )
    parser.add_argument("--variants", type=int, default=settings.mask_variants,
                        help=f"Variants to generate (default: {settings.mask_variants})")
    parser.add_argument("--percentile", type=float, default=settings.mask_percentile,
                        help=f"Fraction of dims marked high-variance (default: {settings.mask_percentile})")
    parser.add_argument("--high-weight", type=float, default=settings.mask_high_weight)
    parser.add_argument("--low-weight", type=float, default=settings.mask_low_weight)
    parser.add_argument("--workers", type=int, default=settings.mask_max_workers,
                        help="Concurrent Replicate calls")
    parser.add_argument("--dry-run", action="store_true", help="Only write run.json, no external calls")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging(json_logs=False, log_level="DEBUG" if args.verbose else "INFO")

    repository = DataRepository.from_settings(settings)
    categories = settings.categories if args.category == "both" else [args.category]

    failures = 0
    for category in categories:
        try:
            with bound_context(category=category):
                run_category(args, settings, repository, category)
        except (BaseProductSelectionError, MaskDiscoveryError, DataFileError, OSError, ValueError) as e:
            failures += 1
            logger.error("Mask discovery failed", category=category, error=str(e))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
