"""
API Layer — Device and Reading Endpoints (Django REST Framework)

Thin controllers over the DeviceRegistry and ReadingLedger.

Responsibilities are intentionally limited to:

- Request validation through serializers (400 with field-level messages)
- Delegation to the registry or ledger
- Translation of domain outcomes into HTTP responses

Mapping:

- DeviceNotFound, or a None result where a device/reading was expected -> 404
- DuplicateSerialNumber -> 400
- Storage failures are handled globally by monitoring.handlers (503)
"""

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from monitoring.application.ledger import ReadingLedger
from monitoring.application.registry import DeviceRegistry
from monitoring.domain.exceptions import DeviceNotFound, DuplicateSerialNumber
from monitoring.models import Device, EnergyReading
from monitoring.serializers import (
    DeviceListQuerySerializer,
    DeviceRegistrationSerializer,
    DeviceSerializer,
    DeviceStatusUpdateSerializer,
    DeviceUpdateSerializer,
    EnergyReadingRequestSerializer,
    EnergyReadingSerializer,
    ReadingRangeQuerySerializer,
)

logger = logging.getLogger(__name__)


def get_registry():
    return DeviceRegistry(Device.objects)


def get_ledger():
    return ReadingLedger(EnergyReading.objects, Device.objects)


def not_found(exc):
    return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)


def duplicate(exc):
    return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class DeviceListView(APIView):
    """
    GET  /api/devices   optional ?serialNumber=, ?status= and ?minLastReading= filters
    POST /api/devices
    """

    @extend_schema(parameters=[DeviceListQuerySerializer], responses={200: DeviceSerializer(many=True)})
    def get(self, request):
        query = DeviceListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        registry = get_registry()
        serial_number = query.validated_data.get("serialNumber")
        device_status = query.validated_data.get("status")
        threshold = query.validated_data.get("minLastReading")

        if serial_number is not None:
            try:
                devices = [registry.find_by_serial_number(serial_number)]
            except DeviceNotFound:
                devices = []
        elif device_status is not None:
            devices = registry.list_by_status(device_status)
        elif threshold is not None:
            devices = registry.list_above_energy(threshold)
        else:
            devices = registry.list_all()

        # Filters combine; whichever query ran first, narrow by the rest.
        if device_status is not None:
            devices = [device for device in devices if device.status == device_status]
        if threshold is not None:
            devices = [
                device for device in devices
                if device.last_energy_reading is not None
                and device.last_energy_reading > threshold
            ]

        return Response(DeviceSerializer(devices, many=True).data)

    @extend_schema(request=DeviceRegistrationSerializer, responses={201: DeviceSerializer, 400: OpenApiTypes.OBJECT})
    def post(self, request):
        payload = DeviceRegistrationSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        logger.info(
            "Received device registration request for serial number: %s",
            payload.validated_data["serialNumber"],
        )

        try:
            device = get_registry().register(
                payload.validated_data["serialNumber"],
                payload.validated_data["deviceType"],
            )
        except DuplicateSerialNumber as exc:
            return duplicate(exc)

        return Response(DeviceSerializer(device).data, status=status.HTTP_201_CREATED)


class DeviceDetailView(APIView):
    """
    GET    /api/devices/<id>
    PUT    /api/devices/<id>
    DELETE /api/devices/<id>
    """

    @extend_schema(responses={200: DeviceSerializer, 404: OpenApiTypes.OBJECT})
    def get(self, request, device_id):
        try:
            device = get_registry().get(device_id)
        except DeviceNotFound as exc:
            return not_found(exc)
        return Response(DeviceSerializer(device).data)

    @extend_schema(
        request=DeviceUpdateSerializer,
        responses={200: DeviceSerializer, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def put(self, request, device_id):
        payload = DeviceUpdateSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            device = get_registry().update_info(
                device_id,
                payload.validated_data["deviceType"],
                payload.validated_data.get("serialNumber"),
            )
        except DeviceNotFound as exc:
            return not_found(exc)
        except DuplicateSerialNumber as exc:
            return duplicate(exc)

        return Response(DeviceSerializer(device).data)

    @extend_schema(responses={204: None, 404: OpenApiTypes.OBJECT})
    def delete(self, request, device_id):
        if not get_registry().delete(device_id):
            return Response(
                {"error": f"Device {device_id} not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class DeviceStatusView(APIView):
    """PATCH /api/devices/<id>/status"""

    @extend_schema(
        request=DeviceStatusUpdateSerializer,
        responses={200: DeviceSerializer, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def patch(self, request, device_id):
        payload = DeviceStatusUpdateSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            device = get_registry().update_status(
                device_id, payload.validated_data["status"],
            )
        except DeviceNotFound as exc:
            return not_found(exc)

        return Response(DeviceSerializer(device).data)


class ReadingListView(APIView):
    """
    GET  /api/devices/<id>/readings?startDate=...&endDate=...
    POST /api/devices/<id>/readings
    """

    @extend_schema(
        parameters=[ReadingRangeQuerySerializer],
        responses={200: EnergyReadingSerializer(many=True), 400: OpenApiTypes.OBJECT},
    )
    def get(self, request, device_id):
        query = ReadingRangeQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        readings = get_ledger().list_in_range(
            device_id,
            query.validated_data["startDate"],
            query.validated_data["endDate"],
        )
        return Response(EnergyReadingSerializer(readings, many=True).data)

    @extend_schema(
        request=EnergyReadingRequestSerializer,
        responses={200: EnergyReadingSerializer, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    def post(self, request, device_id):
        payload = EnergyReadingRequestSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            reading = get_ledger().record(device_id, payload.validated_data["value"])
        except DeviceNotFound as exc:
            return not_found(exc)

        return Response(EnergyReadingSerializer(reading).data, status=status.HTTP_200_OK)


class LatestReadingView(APIView):
    """GET /api/devices/<id>/readings/latest"""

    @extend_schema(responses={200: EnergyReadingSerializer, 404: OpenApiTypes.OBJECT})
    def get(self, request, device_id):
        reading = get_ledger().latest(device_id)
        if reading is None:
            return Response(
                {"error": f"No readings found for device {device_id}"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(EnergyReadingSerializer(reading).data)


class AverageConsumptionView(APIView):
    """GET /api/devices/<id>/readings/average"""

    @extend_schema(responses={200: OpenApiTypes.DOUBLE, 404: OpenApiTypes.OBJECT})
    def get(self, request, device_id):
        average = get_ledger().average(device_id)
        if average is None:
            return Response(
                {"error": f"No readings found for device {device_id}"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(average)
