from __future__ import annotations

from abgate.api.routes.ab_test import router as ab_test_router
from abgate.api.routes.analytics import router as analytics_router
from abgate.api.routes.forms import router as forms_router
from abgate.api.routes.health import router as health_router

__all__ = ["ab_test_router", "analytics_router", "forms_router", "health_router"]
