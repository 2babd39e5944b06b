"""
Request validation and JSON representation for the monitoring API.

Incoming payloads are checked here, before the registry or ledger is
called: required fields, non-blank strings, known status values and
strictly positive readings. The core does not re-validate any of this.
"""

from rest_framework import serializers

from monitoring.models import DeviceStatus


class DeviceSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    serialNumber = serializers.CharField(source="serial_number", read_only=True)
    deviceType = serializers.CharField(source="device_type", read_only=True)
    status = serializers.CharField(read_only=True)
    lastReportTime = serializers.DateTimeField(source="last_report_time", read_only=True)
    lastEnergyReading = serializers.FloatField(source="last_energy_reading", read_only=True)


class EnergyReadingSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    deviceId = serializers.IntegerField(source="device_id", read_only=True)
    deviceSerialNumber = serializers.CharField(source="device.serial_number", read_only=True)
    value = serializers.FloatField(source="energy_consumed", read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)


class DeviceRegistrationSerializer(serializers.Serializer):
    serialNumber = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "Serial number is required",
            "blank": "Serial number is required",
            "null": "Serial number is required",
        },
    )
    deviceType = serializers.CharField(
        max_length=50,
        error_messages={
            "required": "Device type is required",
            "blank": "Device type is required",
            "null": "Device type is required",
        },
    )


class DeviceUpdateSerializer(serializers.Serializer):
    serialNumber = serializers.CharField(max_length=255, required=False, allow_null=True)
    deviceType = serializers.CharField(
        max_length=50,
        error_messages={
            "required": "Device type is required",
            "blank": "Device type is required",
            "null": "Device type is required",
        },
    )


class DeviceStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=DeviceStatus.choices,
        error_messages={
            "required": "Status is required",
            "null": "Status is required",
        },
    )


class EnergyReadingRequestSerializer(serializers.Serializer):
    value = serializers.FloatField(
        error_messages={
            "required": "Energy reading value is required",
            "null": "Energy reading value is required",
        },
    )

    def validate_value(self, value):
        if value <= 0:
            raise serializers.ValidationError("Energy reading must be positive")
        return value


class ReadingRangeQuerySerializer(serializers.Serializer):
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()


class DeviceListQuerySerializer(serializers.Serializer):
    serialNumber = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=DeviceStatus.choices, required=False)
    minLastReading = serializers.FloatField(required=False)
