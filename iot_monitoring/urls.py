from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("api/", include("monitoring.urls")),
    path("v3/api-docs", SpectacularAPIView.as_view(), name="api-schema"),
    path("swagger-ui.html", SpectacularSwaggerView.as_view(url_name="api-schema"), name="swagger-ui"),
]
