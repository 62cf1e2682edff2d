from django.urls import path

from modules.core.views import health_check, startup_init

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("startup/init", startup_init, name="startup_init"),
]
