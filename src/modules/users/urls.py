"""User URL configuration."""

from __future__ import annotations

from modules.core.routers import ApiRouter
from modules.users.views import UserViewSet

router = ApiRouter()
router.register("users", UserViewSet, basename="user")

urlpatterns = router.urls
