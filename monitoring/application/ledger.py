"""
Application Service — Reading Ledger

Owns the append-only history of energy readings and the aggregates over
it, and keeps each device's cached last reading in step with that
history.

Core guarantees:

- Atomicity: record() inserts the reading and refreshes the device's
  last_energy_reading / last_report_time in one transaction.atomic()
  block. Either both are visible or neither is.
- Row-level locking: the device row is taken with select_for_update(),
  so concurrent records for one device commit one after the other and
  the last commit wins the cached fields.
- Deterministic "latest": ties on timestamp are broken by id.

Missing devices are not treated alike across operations. record() raises
DeviceNotFound; latest() and average() return None; list_in_range()
returns an empty list. Callers depend on this split, so it is kept.
"""

import logging

from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from monitoring.domain.exceptions import DeviceNotFound

logger = logging.getLogger(__name__)


class ReadingLedger:

    def __init__(self, readings, devices):
        self.readings = readings
        self.devices = devices

    def record(self, device_id, value):
        """
        Appends a reading stamped with the current time and mirrors it
        onto the owning device.

        The value is stored as given. Positivity is checked by the API
        layer before this is called.
        """
        logger.info("Recording energy reading for device ID: %s", device_id)

        with transaction.atomic():
            try:
                device = (
                    self.devices
                    .select_for_update()
                    .get(pk=device_id)
                )
            except self.devices.model.DoesNotExist:
                logger.warning("Device not found with ID: %s", device_id)
                raise DeviceNotFound(device_id)

            now = timezone.now()
            reading = self.readings.create(
                device=device,
                energy_consumed=value,
                timestamp=now,
            )

            device.last_energy_reading = value
            device.last_report_time = now
            device.save(update_fields=["last_energy_reading", "last_report_time"])

        logger.info("Recorded reading %s for device ID: %s", reading.id, device_id)
        return reading

    def list_in_range(self, device_id, start_time, end_time):
        """Readings with start_time <= timestamp <= end_time, oldest first."""
        logger.info(
            "Fetching readings for device ID: %s between %s and %s",
            device_id, start_time, end_time,
        )

        if not self.devices.filter(pk=device_id).exists():
            logger.warning("Device not found with ID: %s", device_id)
            return []

        return list(
            self.readings
            .filter(
                device_id=device_id,
                timestamp__gte=start_time,
                timestamp__lte=end_time,
            )
            .select_related("device")
            .order_by("timestamp", "id")
        )

    def latest(self, device_id):
        logger.info("Fetching latest reading for device ID: %s", device_id)

        if not self.devices.filter(pk=device_id).exists():
            logger.warning("Device not found with ID: %s", device_id)
            return None

        return (
            self.readings
            .filter(device_id=device_id)
            .select_related("device")
            .order_by("-timestamp", "-id")
            .first()
        )

    def average(self, device_id):
        """Mean energy_consumed over all readings, or None if there are none."""
        logger.info("Calculating average consumption for device ID: %s", device_id)

        if not self.devices.filter(pk=device_id).exists():
            logger.warning("Device not found with ID: %s", device_id)
            return None

        result = (
            self.readings
            .filter(device_id=device_id)
            .aggregate(average=Avg("energy_consumed"))
        )
        return result["average"]
