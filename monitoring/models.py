"""
Persistence Models — Device Registry and Reading Ledger (Django ORM)

This module defines the relational store behind the monitoring service:
registered IoT devices and the energy readings they report.

Key architectural decisions:

- serial_number is UNIQUE at the database level. The registry checks for
  an existing serial before inserting, but the constraint is what stops
  two concurrent registrations of the same serial from both succeeding.
- Device carries a denormalized copy of its most recent reading
  (last_energy_reading / last_report_time) for fast reads. Only the
  ledger writes these fields, in the same transaction as the reading.
- EnergyReading rows are immutable history. Deleting a device cascades
  to its readings.
- Device equality is a business key over (id, serial_number), not the
  primary-key-only equality Django models get by default.
"""

from django.db import models


class DeviceStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"
    MAINTENANCE = "MAINTENANCE", "Maintenance"


class Device(models.Model):
    """
    A registered IoT energy meter.

    last_report_time moves on every recorded reading and every status
    change. last_energy_reading stays null until the first reading.
    """

    serial_number = models.CharField(max_length=255, unique=True)
    device_type = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20,
        choices=DeviceStatus.choices,
        default=DeviceStatus.ACTIVE,
    )
    last_report_time = models.DateTimeField(null=True, blank=True)
    last_energy_reading = models.FloatField(null=True, blank=True)

    class Meta:
        db_table = "devices"

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Device):
            return NotImplemented
        return (self.pk, self.serial_number) == (other.pk, other.serial_number)

    def __hash__(self):
        return hash((self.pk, self.serial_number))

    def __str__(self):
        return (
            f"Device {self.id} ({self.serial_number}) - {self.device_type}, "
            f"{self.status}, last reading {self.last_energy_reading} "
            f"at {self.last_report_time}"
        )


class EnergyReading(models.Model):
    """One energy-consumption observation. Never updated after insert."""

    device = models.ForeignKey(
        Device,
        on_delete=models.CASCADE,
        related_name="readings",
    )

    energy_consumed = models.FloatField()

    # Assigned by the ledger at write time, never by the caller.
    timestamp = models.DateTimeField()

    class Meta:
        db_table = "energy_data"
        indexes = [
            models.Index(fields=["device", "timestamp"], name="energy_data_device_ts_idx"),
        ]

    def __str__(self):
        return f"Reading {self.id} - {self.energy_consumed} @ {self.timestamp}"
