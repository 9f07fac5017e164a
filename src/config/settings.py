"""
Service and CLI configuration, read from the environment with pydantic-settings.

The API routes take settings through Depends(get_settings); tests swap in
get_settings_for_testing(...) via app.dependency_overrides.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """
    Every field has a working default for a checkout run from its root.

    Usually set per deployment:
        - BASE_DIR: Directory holding products.yaml, embeddings.json, events.json
        - REPLICATE_API_TOKEN: Token for variant generation and image embedding
        - APPLY_VARIANCE_MASK: Use mask-weighted cosine similarity when ranking
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", "categories", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    # ==========================================================================
    # Data Files
    # ==========================================================================
    base_dir: Path = Field(
        default=Path("."),
        description="Base directory for data files"
    )
    products_file: str = Field(default="products.yaml", description="Catalog YAML (list of products)")
    metadata_file: str = Field(default="products_metadata.yaml", description="Product metadata YAML (id -> attributes)")
    embeddings_file: str = Field(default="embeddings.json", description="Product id -> embedding vector JSON")
    events_file: str = Field(default="events.json", description="Interaction event log JSON")
    masks_dir_name: str = Field(default="masks", description="Directory for <category>_mask.json artifacts")
    experiments_dir_name: str = Field(
        default="experiments/latent-mask",
        description="Directory for mask discovery run outputs"
    )
    public_dir_name: str = Field(
        default="public",
        description="Static asset directory; catalog image_path values are relative to base_dir and start with it"
    )

    @field_validator("base_dir", mode="before")
    @classmethod
    def parse_base_dir(cls, v):
        if isinstance(v, str):
            return Path(v)
        return v

    @property
    def products_path(self) -> Path:
        return self.base_dir / self.products_file

    @property
    def metadata_path(self) -> Path:
        return self.base_dir / self.metadata_file

    @property
    def embeddings_path(self) -> Path:
        return self.base_dir / self.embeddings_file

    @property
    def events_path(self) -> Path:
        return self.base_dir / self.events_file

    @property
    def masks_dir(self) -> Path:
        return self.base_dir / self.masks_dir_name

    @property
    def experiments_dir(self) -> Path:
        return self.base_dir / self.experiments_dir_name

    @property
    def public_dir(self) -> Path:
        return self.base_dir / self.public_dir_name

    # ==========================================================================
    # Recommendation
    # ==========================================================================
    categories: Annotated[List[str], NoDecode] = Field(
        default=["apparel", "eyewear"],
        description="Allowed product category tags"
    )
    default_category: str = Field(default="apparel", description="Category used when a request omits one")
    like_window_size: int = Field(default=3, ge=1, description="Number of most recent likes in the preference window")
    positive_action: str = Field(default="like", description="Event action that drives scoring")
    recommendation_limit: int = Field(default=6, ge=1, description="Number of recommendations returned by the API")
    apply_variance_mask: bool = Field(
        default=False,
        description="Weight cosine similarity by the stored category mask when one is available"
    )

    # ==========================================================================
    # Replicate (image generation + embedding)
    # ==========================================================================
    replicate_api_token: str = Field(default="", description="Replicate API token")
    replicate_api_base_url: str = Field(
        default="https://api.replicate.com/v1",
        description="Replicate API base URL"
    )
    replicate_embedding_model: str = Field(default="openai/clip", description="Image embedding model")
    replicate_edit_model: str = Field(
        default="black-forest-labs/flux-kontext-pro",
        description="Prompted image editing model used for variants"
    )
    replicate_request_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for a single Replicate HTTP request (seconds)"
    )
    replicate_poll_interval_seconds: float = Field(
        default=1.0,
        description="Delay between prediction status polls (seconds)"
    )
    replicate_prediction_timeout_seconds: float = Field(
        default=300.0,
        description="Maximum time to wait for one prediction to finish (seconds)"
    )
    replicate_max_retries: int = Field(
        default=2,
        ge=0,
        description="Retries for timeouts, connection errors, HTTP 429 and 5xx"
    )

    # ==========================================================================
    # Variance Mask Discovery
    # ==========================================================================
    mask_variants: int = Field(default=8, ge=1, description="Number of generated variants per category")
    mask_percentile: float = Field(default=0.2, gt=0, le=1, description="Fraction of dimensions marked high-variance")
    mask_high_weight: float = Field(default=1.0, description="Weight for high-variance dimensions")
    mask_low_weight: float = Field(default=0.1, description="Weight for the remaining dimensions")
    mask_max_workers: int = Field(default=3, ge=1, description="Concurrent variant generation/embedding calls")


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings: environment variables, then <project root>/.env."""
    env_file = PROJECT_ROOT / ".env"
    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """Uncached settings that ignore .env; environment=testing and debug on unless overridden."""
    values = {"environment": "testing", "debug": True, **overrides}
    return Settings(_env_file=None, **values)
