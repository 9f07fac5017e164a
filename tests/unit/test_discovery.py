"""
Tests for the mask discovery pipeline and run output.

Generation and embedding are faked; the pipeline only sees the
ImageGenerator / ImageEmbedder interfaces.
"""

import json
import threading

import pytest

from masks.discovery import GeneratedImage


class FakeGenerator:
    """Returns one image per prompt; fails for prompts listed in `fail_on`."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []
        self._lock = threading.Lock()

    def edit_image(self, prompt, image_bytes):
        with self._lock:
            self.calls.append(prompt)
            n = len(self.calls)
        if any(token in prompt for token in self.fail_on):
            raise RuntimeError("generation failed")
        return GeneratedImage(url=f"https://img.example/{n}.jpg", content=f"variant:{prompt}".encode())


class FakeEmbedder:
    """Embeds base as [0, 0, 0] and each variant by prompt content."""

    def __init__(self, fail_base=False):
        self.fail_base = fail_base

    def embed_image(self, image_bytes):
        if image_bytes.startswith(b"variant:"):
            text = image_bytes.decode()
            return [float(len(text) % 7), 1.0, 0.0]
        if self.fail_base:
            raise RuntimeError("embedding failed")
        return [0.0, 1.0, 0.0]


@pytest.fixture
def pipeline_factory(repository, data_dir):
    from masks.discovery import MaskDiscoveryPipeline

    def _make(generator=None, embedder=None):
        return MaskDiscoveryPipeline(
            generator or FakeGenerator(),
            embedder or FakeEmbedder(),
            repository.load_catalog(),
            repository.load_metadata(),
            image_root=data_dir,
            max_workers=2,
        )

    return _make


class TestMaskDiscoveryPipeline:
    """Tests for MaskDiscoveryPipeline."""

    def test_discover_mask(self, pipeline_factory):
        mask = pipeline_factory().discover_mask("apparel", variant_count=4, percentile=0.34)

        assert mask.category == "apparel"
        assert mask.base_product_id == "a2"
        assert mask.embedding_dim == 3
        assert mask.top_k == 2
        assert len(mask.variants) == 4
        assert mask.failed_variants == 0
        # Dimension 1 is constant across every embedding
        assert mask.variance[1] == 0.0
        assert mask.params.variants == 4

    def test_generator_receives_base_image(self, repository, data_dir):
        from masks.discovery import MaskDiscoveryPipeline

        seen = []

        class RecordingGenerator(FakeGenerator):
            def edit_image(self, prompt, image_bytes):
                seen.append(image_bytes)
                return super().edit_image(prompt, image_bytes)

        MaskDiscoveryPipeline(
            RecordingGenerator(), FakeEmbedder(),
            repository.load_catalog(), repository.load_metadata(), data_dir,
        ).discover_mask("eyewear", variant_count=2)

        assert seen == [b"jpeg-e2", b"jpeg-e2"]

    def test_prompts_cycle(self, pipeline_factory):
        from masks.prompts import variant_prompts

        generator = FakeGenerator()
        pipeline_factory(generator=generator).discover_mask("eyewear", variant_count=7)

        assert sorted(generator.calls) == sorted(variant_prompts("eyewear") + variant_prompts("eyewear")[:2])

    def test_partial_failures_are_recorded(self, pipeline_factory):
        generator = FakeGenerator(fail_on={"business casual", "athleisure"})
        result = pipeline_factory(generator=generator).run("apparel", variant_count=6)

        assert result.mask.failed_variants == 2
        failed = [v for v in result.mask.variants if not v.succeeded]
        assert {v.index for v in failed} == {0, 2}
        assert all("generation failed" in v.error for v in failed)
        assert len([o for o in result.outcomes if o.embedding is not None]) == 4

    def test_base_embedding_failure_is_not_fatal(self, pipeline_factory):
        result = pipeline_factory(embedder=FakeEmbedder(fail_base=True)).run("apparel", variant_count=3)

        assert result.base_embedding is None
        assert result.mask.embedding_dim == 3

    def test_everything_failing_raises(self, pipeline_factory):
        from masks.discovery import MaskDiscoveryError

        generator = FakeGenerator(fail_on={"Change"})
        with pytest.raises(MaskDiscoveryError):
            pipeline_factory(generator=generator, embedder=FakeEmbedder(fail_base=True)).run(
                "apparel", variant_count=3
            )

    def test_zero_variants_uses_base_only(self, pipeline_factory):
        mask = pipeline_factory().discover_mask("apparel", variant_count=0)

        assert mask.variance == [0.0, 0.0, 0.0]
        assert mask.variants == []

    def test_negative_variant_count(self, pipeline_factory):
        with pytest.raises(ValueError):
            pipeline_factory().run("apparel", variant_count=-1)

    def test_requested_base_fails_fast(self, pipeline_factory):
        from masks.base_selection import BaseProductSelectionError

        generator = FakeGenerator()
        with pytest.raises(BaseProductSelectionError):
            pipeline_factory(generator=generator).run("apparel", base_product_id="a1")
        assert generator.calls == []

    def test_run_id_passed_through(self, pipeline_factory):
        result = pipeline_factory().run("apparel", variant_count=1, run_id="run-42")
        assert result.mask.run_id == "run-42"


class TestExperimentOutput:
    """Tests for masks.experiment."""

    def test_write_run(self, pipeline_factory, data_dir):
        from masks.experiment import run_directory, write_run

        generator = FakeGenerator(fail_on={"athleisure"})
        result = pipeline_factory(generator=generator).run("apparel", variant_count=3, run_id="r1")
        out_dir = run_directory(data_dir / "experiments" / "latent-mask", "apparel", "r1")

        write_run(result, out_dir, data_dir, mask_path=data_dir / "masks" / "apparel_mask.json")

        assert (out_dir / "base.jpg").read_bytes() == b"jpeg-a2"
        assert (out_dir / "variant_00.jpg").exists()
        assert not (out_dir / "variant_02.jpg").exists()

        embeddings = json.loads((out_dir / "embeddings.json").read_text())
        assert set(embeddings) == {"base", "variant_00.jpg", "variant_01.jpg"}

        manifest = json.loads((out_dir / "run.json").read_text())
        assert manifest["runId"] == "r1"
        assert manifest["baseProductId"] == "a2"
        assert manifest["experimentDir"] == "experiments/latent-mask/apparel/r1"
        assert manifest["maskPath"] == "masks/apparel_mask.json"
        assert manifest["failedVariants"] == 1
        assert manifest["variantImagePaths"][2] is None
        assert manifest["dryRun"] is False

    def test_mask_artifact_records_experiment_dir(self, pipeline_factory, repository, data_dir):
        from masks.experiment import run_directory, with_experiment_dir

        result = pipeline_factory().run("apparel", variant_count=2, run_id="r2")
        assert result.mask.to_artifact()["experimentDir"] is None

        out_dir = run_directory(data_dir / "experiments" / "latent-mask", "apparel", "r2")
        mask = with_experiment_dir(result.mask, out_dir, data_dir)
        path = repository.save_mask(mask)

        saved = json.loads(path.read_text())
        assert saved["experimentDir"] == "experiments/latent-mask/apparel/r2"
        assert repository.load_mask("apparel").experiment_dir == "experiments/latent-mask/apparel/r2"

    def test_write_dry_run(self, repository, data_dir):
        from masks.base_selection import select_base_product
        from masks.experiment import run_directory, write_dry_run
        from masks.prompts import plan_variant_prompts

        base = select_base_product("eyewear", repository.load_catalog(), repository.load_metadata(), data_dir)
        out_dir = run_directory(data_dir / "experiments" / "latent-mask", "eyewear", "dry")

        write_dry_run(out_dir, data_dir, "eyewear", "dry", base, plan_variant_prompts("eyewear", 2))

        assert [p.name for p in out_dir.iterdir()] == ["run.json"]
        manifest = json.loads((out_dir / "run.json").read_text())
        assert manifest["dryRun"] is True
        assert manifest["variantImagePaths"] == [
            "experiments/latent-mask/eyewear/dry/variant_00.jpg",
            "experiments/latent-mask/eyewear/dry/variant_01.jpg",
        ]
