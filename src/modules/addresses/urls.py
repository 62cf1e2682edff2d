"""Address URL configuration."""

from __future__ import annotations

from modules.addresses.views import AddressViewSet
from modules.core.routers import ApiRouter

router = ApiRouter()
router.register("addresses", AddressViewSet, basename="address")

urlpatterns = router.urls
