from django.urls import path

from .views import (
    AverageConsumptionView,
    DeviceDetailView,
    DeviceListView,
    DeviceStatusView,
    LatestReadingView,
    ReadingListView,
)

urlpatterns = [
    path("devices", DeviceListView.as_view(), name="device-list"),
    path("devices/<int:device_id>", DeviceDetailView.as_view(), name="device-detail"),
    path("devices/<int:device_id>/status", DeviceStatusView.as_view(), name="device-status"),
    path("devices/<int:device_id>/readings", ReadingListView.as_view(), name="reading-list"),
    path("devices/<int:device_id>/readings/latest", LatestReadingView.as_view(), name="reading-latest"),
    path("devices/<int:device_id>/readings/average", AverageConsumptionView.as_view(), name="reading-average"),
]
