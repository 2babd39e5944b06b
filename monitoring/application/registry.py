"""
Application Service — Device Registry

Owns device identity and the status lifecycle. Every write runs inside
transaction.atomic().

Serial numbers are unique and compared exactly (case-sensitive). The
existence check before an insert or rename only gives a clean early
answer; the UNIQUE constraint on devices.serial_number is the real guard,
and an IntegrityError raised by it is reported as the same
DuplicateSerialNumber the pre-check would have raised.

The registry never touches last_energy_reading. That field belongs to
the ReadingLedger.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from monitoring.domain.exceptions import DeviceNotFound, DuplicateSerialNumber
from monitoring.models import DeviceStatus

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Device CRUD over an injected Device manager (usually Device.objects)."""

    def __init__(self, devices):
        self.devices = devices

    def register(self, serial_number, device_type):
        """
        Creates an ACTIVE device with no reading yet.

        Raises DuplicateSerialNumber if the serial is already taken.
        """
        logger.info("Registering new device with serial number: %s", serial_number)

        with transaction.atomic():
            if self.devices.filter(serial_number=serial_number).exists():
                logger.warning("Device with serial number %s already exists", serial_number)
                raise DuplicateSerialNumber(serial_number)

            try:
                device = self.devices.create(
                    serial_number=serial_number,
                    device_type=device_type,
                    status=DeviceStatus.ACTIVE,
                    last_report_time=timezone.now(),
                )
            except IntegrityError:
                # Lost the race against a concurrent registration
                logger.warning(
                    "Unique constraint rejected serial number %s", serial_number,
                )
                raise DuplicateSerialNumber(serial_number)

        logger.info("Device registered successfully with ID: %s", device.id)
        return device

    def get(self, device_id):
        logger.info("Fetching device with ID: %s", device_id)
        try:
            return self.devices.get(pk=device_id)
        except self.devices.model.DoesNotExist:
            logger.warning("Device not found with ID: %s", device_id)
            raise DeviceNotFound(device_id)

    def find_by_serial_number(self, serial_number):
        logger.info("Fetching device with serial number: %s", serial_number)
        try:
            return self.devices.get(serial_number=serial_number)
        except self.devices.model.DoesNotExist:
            logger.warning("Device not found with serial number: %s", serial_number)
            raise DeviceNotFound(serial_number)

    def list_all(self):
        logger.info("Fetching all devices")
        return list(self.devices.all())

    def list_by_status(self, status):
        logger.info("Fetching devices with status: %s", status)
        return list(self.devices.filter(status=status))

    def list_above_energy(self, threshold):
        """Devices whose cached last reading is strictly above threshold."""
        logger.info("Fetching devices with last reading above: %s", threshold)
        return list(self.devices.filter(last_energy_reading__gt=threshold))

    def update_status(self, device_id, status):
        """Sets the status and stamps last_report_time. The cached reading is left alone."""
        logger.info("Updating device status for ID: %s", device_id)

        with transaction.atomic():
            device = self._get_for_update(device_id)
            device.status = status
            device.last_report_time = timezone.now()
            device.save(update_fields=["status", "last_report_time"])

        logger.info("Device status updated successfully for ID: %s", device_id)
        return device

    def update_info(self, device_id, device_type, serial_number=None):
        """
        Overwrites device_type and, when a different serial_number is
        given, renames the device.

        Renaming to the device's own serial is a no-op. Status and the
        cached reading fields are never touched here.
        """
        logger.info("Updating device with ID: %s", device_id)

        with transaction.atomic():
            device = self._get_for_update(device_id)
            device.device_type = device_type

            if serial_number is not None and serial_number != device.serial_number:
                taken = (
                    self.devices
                    .filter(serial_number=serial_number)
                    .exclude(pk=device.pk)
                    .exists()
                )
                if taken:
                    logger.warning("Device with serial number %s already exists", serial_number)
                    raise DuplicateSerialNumber(serial_number)
                device.serial_number = serial_number

            try:
                device.save(update_fields=["device_type", "serial_number"])
            except IntegrityError:
                logger.warning(
                    "Unique constraint rejected serial number %s", serial_number,
                )
                raise DuplicateSerialNumber(serial_number)

        logger.info("Device updated successfully for ID: %s", device_id)
        return device

    def delete(self, device_id):
        """
        Removes the device and, through the cascade, its readings.

        Returns False rather than raising when the id does not exist.
        """
        logger.info("Attempting to delete device with ID: %s", device_id)

        with transaction.atomic():
            if not self.devices.filter(pk=device_id).exists():
                logger.warning("Device not found with ID: %s", device_id)
                return False
            self.devices.filter(pk=device_id).delete()

        logger.info("Device deleted successfully with ID: %s", device_id)
        return True

    def _get_for_update(self, device_id):
        try:
            return self.devices.select_for_update().get(pk=device_id)
        except self.devices.model.DoesNotExist:
            logger.warning("Device not found with ID: %s", device_id)
            raise DeviceNotFound(device_id)
