#!/usr/bin/env python3
"""
Generate image embeddings for every catalog product.

Existing entries in embeddings.json are kept and skipped; the file is
rewritten after each successful product so an interrupted run resumes.
"""

import argparse
import json
import sys
from pathlib import Path

from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv  # noqa: E402

from config.settings import get_settings  # noqa: E402
from core.logging import configure_logging, get_logger  # noqa: E402
from core.utils import atomic_write_json  # noqa: E402
from masks.replicate_client import ReplicateClient, ReplicateError  # noqa: E402
from recs.data import DataRepository  # noqa: E402


logger = get_logger("generate_embeddings")


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(description="Embed catalog images via Replicate")
    parser.add_argument("--category", default=None, help="Only embed products of this category")
    parser.add_argument("--force", action="store_true", help="Re-embed products that already have a vector")
    args = parser.parse_args()

    configure_logging(json_logs=False, log_level="INFO")

    settings = get_settings()
    repository = DataRepository.from_settings(settings)
    client = ReplicateClient(settings)

    products = repository.load_catalog()
    if args.category:
        products = [p for p in products if p.category == args.category]

    embeddings = {}
    if settings.embeddings_path.exists():
        with settings.embeddings_path.open("r", encoding="utf-8") as f:
            embeddings = json.load(f)
        print(f"Loaded {len(embeddings)} existing embeddings.")

    todo = [p for p in products if args.force or p.id not in embeddings]
    print(f"{len(todo)} of {len(products)} products need embeddings")

    failed = []
    for product in tqdm(todo, desc="Generating embeddings"):
        if not product.image_path:
            failed.append(product.id)
            continue
        image_path = settings.base_dir.joinpath(*product.image_path.split("/"))
        try:
            embeddings[product.id] = client.embed_image(image_path.read_bytes())
        except (OSError, ReplicateError) as e:
            logger.warning("Embedding failed", product_id=product.id, error=str(e))
            failed.append(product.id)
            continue
        atomic_write_json(settings.embeddings_path, embeddings)

    print(f"Done. {len(embeddings)} embeddings saved, {len(failed)} failed.")
    if failed:
        print(f"Failed: {', '.join(failed)}")


if __name__ == "__main__":
    main()
