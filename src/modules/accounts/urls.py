"""Authentication URL configuration."""

from __future__ import annotations

from modules.accounts.views import AuthViewSet
from modules.core.routers import ApiRouter

router = ApiRouter()
router.register("auth", AuthViewSet, basename="auth")

urlpatterns = router.urls
