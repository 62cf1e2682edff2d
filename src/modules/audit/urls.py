"""Audit URL configuration."""

from __future__ import annotations

from modules.audit.views import AuditViewSet
from modules.core.routers import ApiRouter

router = ApiRouter()
router.register("audit", AuditViewSet, basename="audit")

urlpatterns = router.urls
