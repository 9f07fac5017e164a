"""
Tests for the configuration module.
"""

from pathlib import Path

import pytest


class TestSettings:
    """Tests for Settings class."""

    def test_defaults(self):
        from config.settings import Settings

        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.categories == ["apparel", "eyewear"]
        assert settings.like_window_size == 3
        assert settings.recommendation_limit == 6
        assert settings.apply_variance_mask is False
        assert settings.mask_variants == 8
        assert settings.mask_percentile == 0.2
        assert settings.mask_high_weight == 1.0
        assert settings.mask_low_weight == 0.1
        assert settings.replicate_embedding_model == "openai/clip"

    @pytest.mark.parametrize("env,dev,prod", [
        ("development", True, False),
        ("local", True, False),
        ("production", False, True),
        ("prod", False, True),
        ("staging", False, False),
    ])
    def test_environment_properties(self, env, dev, prod):
        from config.settings import Settings

        settings = Settings(environment=env)
        assert settings.is_development is dev
        assert settings.is_production is prod

    def test_comma_separated_lists(self):
        from config.settings import Settings

        settings = Settings(
            cors_origins="http://localhost:3000, http://localhost:5173",
            categories="apparel,eyewear,shoes",
        )

        assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]
        assert settings.categories == ["apparel", "eyewear", "shoes"]

    def test_categories_from_env(self, monkeypatch):
        from config.settings import Settings

        monkeypatch.setenv("CATEGORIES", "apparel,eyewear,shoes")

        settings = Settings(_env_file=None)
        assert settings.categories == ["apparel", "eyewear", "shoes"]

    def test_cors_origins_from_env(self, monkeypatch):
        from config.settings import Settings

        monkeypatch.setenv("CORS_ORIGINS", "https://shop.example.com, http://localhost:3000")

        settings = Settings(_env_file=None)
        assert settings.cors_origins == ["https://shop.example.com", "http://localhost:3000"]

    def test_json_list_from_env(self, monkeypatch):
        from config.settings import Settings

        monkeypatch.setenv("CATEGORIES", '["apparel", "shoes"]')

        assert Settings(_env_file=None).categories == ["apparel", "shoes"]

    def test_path_properties(self):
        from config.settings import Settings

        settings = Settings(base_dir="/opt/app")

        assert settings.base_dir == Path("/opt/app")
        assert settings.products_path == Path("/opt/app/products.yaml")
        assert settings.metadata_path == Path("/opt/app/products_metadata.yaml")
        assert settings.embeddings_path == Path("/opt/app/embeddings.json")
        assert settings.events_path == Path("/opt/app/events.json")
        assert settings.masks_dir == Path("/opt/app/masks")
        assert settings.experiments_dir == Path("/opt/app/experiments/latent-mask")
        assert settings.public_dir == Path("/opt/app/public")

    def test_env_overrides(self, monkeypatch):
        from config.settings import Settings

        monkeypatch.setenv("APPLY_VARIANCE_MASK", "true")
        monkeypatch.setenv("RECOMMENDATION_LIMIT", "10")

        settings = Settings()
        assert settings.apply_variance_mask is True
        assert settings.recommendation_limit == 10

    def test_invalid_percentile_rejected(self):
        from pydantic import ValidationError
        from config.settings import Settings

        with pytest.raises(ValidationError):
            Settings(mask_percentile=0)

    def test_settings_for_testing(self):
        from config.settings import get_settings_for_testing

        settings = get_settings_for_testing(like_window_size=5)

        assert settings.environment == "testing"
        assert settings.debug is True
        assert settings.like_window_size == 5

    def test_get_settings_cached(self):
        from config.settings import get_settings

        assert get_settings() is get_settings()
