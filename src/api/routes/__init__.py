"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import events
from api.routes import health
from api.routes import masks
from api.routes import products
from api.routes import recommendations

__all__ = ["events", "health", "masks", "products", "recommendations"]
