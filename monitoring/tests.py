from datetime import datetime, timezone as dt_timezone
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from monitoring.application.ledger import ReadingLedger
from monitoring.application.registry import DeviceRegistry
from monitoring.domain.exceptions import DeviceNotFound, DuplicateSerialNumber
from monitoring.models import Device, DeviceStatus, EnergyReading


def at(hour, minute=0):
    return datetime(2026, 1, 15, hour, minute, tzinfo=dt_timezone.utc)


class DeviceEqualityTest(TestCase):
    """Device equality is the (id, serial_number) business key."""

    def test_same_id_and_serial_are_equal_regardless_of_other_fields(self):
        a = Device(id=1, serial_number="DEV-1", device_type="SMART_METER")
        b = Device(id=1, serial_number="DEV-1", device_type="THERMOSTAT",
                   status=DeviceStatus.MAINTENANCE, last_energy_reading=3.0)

        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_same_id_different_serial_are_not_equal(self):
        a = Device(id=1, serial_number="DEV-1", device_type="SMART_METER")
        b = Device(id=1, serial_number="DEV-2", device_type="SMART_METER")

        self.assertNotEqual(a, b)

    def test_reloaded_device_equals_original(self):
        device = Device.objects.create(serial_number="DEV-1", device_type="SMART_METER")

        self.assertEqual(device, Device.objects.get(pk=device.pk))

    def test_not_equal_to_other_types(self):
        device = Device(id=1, serial_number="DEV-1", device_type="SMART_METER")

        self.assertNotEqual(device, (1, "DEV-1"))


class DeviceRegistryTest(TestCase):

    def setUp(self):
        self.registry = DeviceRegistry(Device.objects)

    def test_register_creates_active_device_without_reading(self):
        before = timezone.now()
        device = self.registry.register("DEV-1", "SMART_METER")

        fetched = self.registry.get(device.id)
        self.assertEqual(fetched.serial_number, "DEV-1")
        self.assertEqual(fetched.device_type, "SMART_METER")
        self.assertEqual(fetched.status, DeviceStatus.ACTIVE)
        self.assertIsNone(fetched.last_energy_reading)
        self.assertGreaterEqual(fetched.last_report_time, before)

    def test_register_duplicate_serial_fails_and_keeps_one_device(self):
        self.registry.register("DEV-1", "SMART_METER")

        with self.assertRaises(DuplicateSerialNumber) as ctx:
            self.registry.register("DEV-1", "THERMOSTAT")

        self.assertEqual(ctx.exception.serial_number, "DEV-1")
        matching = [d for d in self.registry.list_all() if d.serial_number == "DEV-1"]
        self.assertEqual(len(matching), 1)
        self.assertEqual(matching[0].device_type, "SMART_METER")

    def test_unique_constraint_rejects_duplicate_when_precheck_misses(self):
        """A concurrent registration can pass the existence check; the constraint must still hold."""
        self.registry.register("DEV-1", "SMART_METER")

        with mock.patch("django.db.models.query.QuerySet.exists", return_value=False):
            with self.assertRaises(DuplicateSerialNumber):
                self.registry.register("DEV-1", "SMART_METER")

        self.assertEqual(Device.objects.filter(serial_number="DEV-1").count(), 1)

    def test_serial_numbers_are_case_sensitive(self):
        self.registry.register("DEV-1", "SMART_METER")
        self.registry.register("dev-1", "SMART_METER")

        self.assertEqual(Device.objects.count(), 2)

    def test_get_missing_device_raises(self):
        with self.assertRaises(DeviceNotFound) as ctx:
            self.registry.get(99999)

        self.assertEqual(ctx.exception.device_id, 99999)

    def test_find_by_serial_number(self):
        device = self.registry.register("DEV-1", "SMART_METER")

        self.assertEqual(self.registry.find_by_serial_number("DEV-1"), device)
        with self.assertRaises(DeviceNotFound):
            self.registry.find_by_serial_number("DEV-404")

    def test_list_by_status_matches_exactly(self):
        active = self.registry.register("DEV-1", "SMART_METER")
        idle = self.registry.register("DEV-2", "SMART_METER")
        self.registry.update_status(idle.id, DeviceStatus.INACTIVE)

        self.assertEqual(self.registry.list_by_status(DeviceStatus.ACTIVE), [active])
        self.assertEqual(
            [d.id for d in self.registry.list_by_status(DeviceStatus.INACTIVE)],
            [idle.id],
        )
        self.assertEqual(self.registry.list_by_status(DeviceStatus.MAINTENANCE), [])

    def test_list_above_energy_skips_devices_without_reading(self):
        ledger = ReadingLedger(EnergyReading.objects, Device.objects)
        high = self.registry.register("DEV-1", "SMART_METER")
        low = self.registry.register("DEV-2", "SMART_METER")
        self.registry.register("DEV-3", "SMART_METER")
        ledger.record(high.id, 500.0)
        ledger.record(low.id, 50.0)

        self.assertEqual(
            [d.serial_number for d in self.registry.list_above_energy(100.0)],
            ["DEV-1"],
        )
        self.assertEqual(self.registry.list_above_energy(500.0), [])

    def test_update_status_refreshes_report_time_only(self):
        device = self.registry.register("DEV-1", "SMART_METER")
        stale = at(0)
        Device.objects.filter(pk=device.pk).update(
            last_report_time=stale, last_energy_reading=42.0,
        )

        updated = self.registry.update_status(device.id, DeviceStatus.MAINTENANCE)

        fetched = self.registry.get(device.id)
        self.assertEqual(updated.status, DeviceStatus.MAINTENANCE)
        self.assertEqual(fetched.status, DeviceStatus.MAINTENANCE)
        self.assertGreater(fetched.last_report_time, stale)
        self.assertEqual(fetched.last_energy_reading, 42.0)

    def test_update_status_missing_device_creates_nothing(self):
        with self.assertRaises(DeviceNotFound):
            self.registry.update_status(99999, DeviceStatus.MAINTENANCE)

        self.assertEqual(Device.objects.count(), 0)

    def test_update_info_overwrites_type_and_renames(self):
        device = self.registry.register("DEV-1", "SMART_METER")
        Device.objects.filter(pk=device.pk).update(last_report_time=at(0))

        self.registry.update_info(device.id, "THERMOSTAT", "DEV-9")

        fetched = self.registry.get(device.id)
        self.assertEqual(fetched.device_type, "THERMOSTAT")
        self.assertEqual(fetched.serial_number, "DEV-9")
        self.assertEqual(fetched.status, DeviceStatus.ACTIVE)
        self.assertEqual(fetched.last_report_time, at(0))

    def test_update_info_without_serial_keeps_serial(self):
        device = self.registry.register("DEV-1", "SMART_METER")

        self.registry.update_info(device.id, "THERMOSTAT")

        self.assertEqual(self.registry.get(device.id).serial_number, "DEV-1")

    def test_update_info_self_rename_is_not_a_duplicate(self):
        device = self.registry.register("DEV-1", "SMART_METER")

        updated = self.registry.update_info(device.id, "THERMOSTAT", "DEV-1")

        self.assertEqual(updated.serial_number, "DEV-1")
        self.assertEqual(updated.device_type, "THERMOSTAT")

    def test_update_info_rename_to_taken_serial_fails_without_changes(self):
        self.registry.register("DEV-1", "SMART_METER")
        device = self.registry.register("DEV-2", "SMART_METER")

        with self.assertRaises(DuplicateSerialNumber):
            self.registry.update_info(device.id, "THERMOSTAT", "DEV-1")

        fetched = self.registry.get(device.id)
        self.assertEqual(fetched.serial_number, "DEV-2")
        self.assertEqual(fetched.device_type, "SMART_METER")

    def test_unique_constraint_rejects_rename_when_precheck_misses(self):
        self.registry.register("DEV-1", "SMART_METER")
        device = self.registry.register("DEV-2", "SMART_METER")

        with mock.patch("django.db.models.query.QuerySet.exists", return_value=False):
            with self.assertRaises(DuplicateSerialNumber) as ctx:
                self.registry.update_info(device.id, "THERMOSTAT", "DEV-1")

        self.assertEqual(ctx.exception.serial_number, "DEV-1")
        fetched = self.registry.get(device.id)
        self.assertEqual(fetched.serial_number, "DEV-2")
        self.assertEqual(fetched.device_type, "SMART_METER")

    def test_update_info_missing_device_raises(self):
        with self.assertRaises(DeviceNotFound):
            self.registry.update_info(99999, "THERMOSTAT", "DEV-1")

    def test_delete_twice_returns_true_then_false(self):
        device = self.registry.register("DEV-1", "SMART_METER")

        self.assertTrue(self.registry.delete(device.id))
        self.assertFalse(self.registry.delete(device.id))
        self.assertEqual(Device.objects.count(), 0)

    def test_delete_cascades_to_readings(self):
        ledger = ReadingLedger(EnergyReading.objects, Device.objects)
        device = self.registry.register("DEV-1", "SMART_METER")
        ledger.record(device.id, 10.0)
        ledger.record(device.id, 20.0)

        self.registry.delete(device.id)

        self.assertEqual(EnergyReading.objects.count(), 0)


class ReadingLedgerTest(TestCase):

    def setUp(self):
        self.ledger = ReadingLedger(EnergyReading.objects, Device.objects)
        self.device = DeviceRegistry(Device.objects).register("DEV-1", "SMART_METER")

    def place(self, value, when):
        """Inserts a reading at a fixed time, bypassing the ledger's clock."""
        return EnergyReading.objects.create(
            device=self.device, energy_consumed=value, timestamp=when,
        )

    def test_record_updates_device_cache_and_latest(self):
        reading = self.ledger.record(self.device.id, 120.5)

        device = Device.objects.get(pk=self.device.pk)
        self.assertEqual(reading.energy_consumed, 120.5)
        self.assertEqual(reading.device_id, self.device.id)
        self.assertGreaterEqual(reading.timestamp, self.device.last_report_time)
        self.assertEqual(device.last_energy_reading, 120.5)
        self.assertEqual(device.last_report_time, reading.timestamp)
        self.assertEqual(self.ledger.latest(self.device.id).energy_consumed, 120.5)

    def test_record_sequence_keeps_last_value_cached(self):
        for value in (10.0, 30.0, 20.0):
            self.ledger.record(self.device.id, value)

        device = Device.objects.get(pk=self.device.pk)
        self.assertEqual(device.last_energy_reading, 20.0)
        self.assertEqual(self.ledger.latest(self.device.id).energy_consumed, 20.0)
        self.assertEqual(EnergyReading.objects.filter(device=self.device).count(), 3)

    def test_record_missing_device_raises_and_stores_nothing(self):
        with self.assertRaises(DeviceNotFound):
            self.ledger.record(99999, 10.0)

        self.assertEqual(EnergyReading.objects.count(), 0)

    def test_record_rolls_back_reading_when_device_update_fails(self):
        with mock.patch.object(Device, "save", side_effect=DatabaseError("disk full")):
            with self.assertRaises(DatabaseError):
                self.ledger.record(self.device.id, 99.0)

        self.assertEqual(EnergyReading.objects.count(), 0)
        self.assertIsNone(Device.objects.get(pk=self.device.pk).last_energy_reading)

    def test_average_is_mean_of_all_readings(self):
        values = [1.5, 2.25, 10.0, 7.75]
        for value in values:
            self.ledger.record(self.device.id, value)

        self.assertAlmostEqual(
            self.ledger.average(self.device.id), sum(values) / len(values),
        )

    def test_average_without_readings_is_none(self):
        self.assertIsNone(self.ledger.average(self.device.id))

    def test_average_missing_device_is_none(self):
        self.assertIsNone(self.ledger.average(99999))

    def test_latest_without_readings_is_none(self):
        self.assertIsNone(self.ledger.latest(self.device.id))

    def test_latest_missing_device_is_none(self):
        self.assertIsNone(self.ledger.latest(99999))

    def test_latest_picks_newest_timestamp(self):
        self.place(1.0, at(9))
        newest = self.place(2.0, at(11))
        self.place(3.0, at(10))

        self.assertEqual(self.ledger.latest(self.device.id).id, newest.id)

    def test_latest_breaks_timestamp_ties_by_id(self):
        self.place(1.0, at(12))
        second = self.place(2.0, at(12))

        self.assertEqual(self.ledger.latest(self.device.id).id, second.id)

    def test_list_in_range_is_inclusive_and_ordered(self):
        self.place(1.0, at(8))
        first = self.place(2.0, at(9))
        third = self.place(4.0, at(11))
        second = self.place(3.0, at(10))
        self.place(5.0, at(12))

        readings = self.ledger.list_in_range(self.device.id, at(9), at(11))

        self.assertEqual([r.id for r in readings], [first.id, second.id, third.id])

    def test_list_in_range_without_matches_is_empty(self):
        self.place(1.0, at(8))

        self.assertEqual(self.ledger.list_in_range(self.device.id, at(13), at(14)), [])

    def test_list_in_range_ignores_other_devices(self):
        other = DeviceRegistry(Device.objects).register("DEV-2", "SMART_METER")
        mine = self.place(1.0, at(9))
        EnergyReading.objects.create(device=other, energy_consumed=2.0, timestamp=at(9))

        readings = self.ledger.list_in_range(self.device.id, at(0), at(23))

        self.assertEqual([r.id for r in readings], [mine.id])

    def test_list_in_range_missing_device_is_empty(self):
        self.assertEqual(self.ledger.list_in_range(99999, at(0), at(23)), [])


class DeviceEndpointTest(TestCase):
    """
    Tests for /api/devices

    Each test runs inside a transaction that is rolled back automatically.
    """

    def setUp(self):
        self.client = APIClient()

    def register(self, serial="DEV-1", device_type="SMART_METER"):
        return self.client.post("/api/devices", {
            "serialNumber": serial,
            "deviceType": device_type,
        })

    def test_register_returns_created_device(self):
        response = self.register()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["serialNumber"], "DEV-1")
        self.assertEqual(response.data["deviceType"], "SMART_METER")
        self.assertEqual(response.data["status"], "ACTIVE")
        self.assertIsNone(response.data["lastEnergyReading"])
        self.assertIsNotNone(response.data["lastReportTime"])
        self.assertEqual(
            set(response.data),
            {"id", "serialNumber", "deviceType", "status", "lastReportTime", "lastEnergyReading"},
        )

    def test_register_duplicate_returns_400(self):
        self.register()
        response = self.register()

        self.assertEqual(response.status_code, 400)
        self.assertIn("DEV-1", response.data["error"])

        listing = self.client.get("/api/devices")
        self.assertEqual(
            [d["serialNumber"] for d in listing.data].count("DEV-1"), 1,
        )

    def test_register_blank_fields_returns_400(self):
        response = self.register(serial="", device_type="")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["serialNumber"][0], "Serial number is required")
        self.assertEqual(response.data["deviceType"][0], "Device type is required")
        self.assertEqual(Device.objects.count(), 0)

    def test_register_missing_fields_returns_400(self):
        response = self.client.post("/api/devices", {})

        self.assertEqual(response.status_code, 400)
        self.assertIn("serialNumber", response.data)
        self.assertIn("deviceType", response.data)

    def test_list_devices(self):
        self.register("DEV-1")
        self.register("DEV-2")

        response = self.client.get("/api/devices")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            sorted(d["serialNumber"] for d in response.data), ["DEV-1", "DEV-2"],
        )

    def test_list_devices_filtered_by_status(self):
        self.register("DEV-1")
        device_id = self.register("DEV-2").data["id"]
        self.client.patch(f"/api/devices/{device_id}/status", {"status": "MAINTENANCE"})

        response = self.client.get("/api/devices", {"status": "MAINTENANCE"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([d["id"] for d in response.data], [device_id])

    def test_list_devices_filtered_by_last_reading(self):
        high = self.register("DEV-1").data["id"]
        low = self.register("DEV-2").data["id"]
        self.client.post(f"/api/devices/{high}/readings", {"value": 300.0})
        self.client.post(f"/api/devices/{low}/readings", {"value": 30.0})

        response = self.client.get("/api/devices", {"minLastReading": "100"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([d["id"] for d in response.data], [high])

        combined = self.client.get("/api/devices", {"status": "ACTIVE", "minLastReading": "10"})
        self.assertEqual(sorted(d["id"] for d in combined.data), sorted([high, low]))

    def test_list_devices_filtered_by_serial_number(self):
        device_id = self.register("DEV-1").data["id"]
        self.register("DEV-2")

        found = self.client.get("/api/devices", {"serialNumber": "DEV-1"})
        missing = self.client.get("/api/devices", {"serialNumber": "dev-1"})
        mismatched = self.client.get("/api/devices", {"serialNumber": "DEV-1", "status": "INACTIVE"})

        self.assertEqual(found.status_code, 200)
        self.assertEqual([d["id"] for d in found.data], [device_id])
        self.assertEqual(missing.status_code, 200)
        self.assertEqual(missing.data, [])
        self.assertEqual(mismatched.data, [])

    def test_list_devices_with_unknown_status_returns_400(self):
        response = self.client.get("/api/devices", {"status": "BROKEN"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.data)

    def test_get_device(self):
        device_id = self.register().data["id"]

        response = self.client.get(f"/api/devices/{device_id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], device_id)

    def test_get_missing_device_returns_404(self):
        response = self.client.get("/api/devices/99999")

        self.assertEqual(response.status_code, 404)

    def test_update_device(self):
        device_id = self.register().data["id"]

        response = self.client.put(f"/api/devices/{device_id}", {
            "deviceType": "THERMOSTAT",
            "serialNumber": "DEV-9",
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["deviceType"], "THERMOSTAT")
        self.assertEqual(response.data["serialNumber"], "DEV-9")

    def test_update_device_without_serial_keeps_it(self):
        device_id = self.register().data["id"]

        response = self.client.put(f"/api/devices/{device_id}", {"deviceType": "THERMOSTAT"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["serialNumber"], "DEV-1")

    def test_update_device_to_taken_serial_returns_400(self):
        self.register("DEV-1")
        device_id = self.register("DEV-2").data["id"]

        response = self.client.put(f"/api/devices/{device_id}", {
            "deviceType": "THERMOSTAT",
            "serialNumber": "DEV-1",
        })

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Device.objects.get(pk=device_id).serial_number, "DEV-2")

    def test_update_with_blank_serial_returns_400(self):
        device_id = self.register().data["id"]

        response = self.client.put(f"/api/devices/{device_id}", {
            "deviceType": "THERMOSTAT",
            "serialNumber": "",
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn("serialNumber", response.data)
        self.assertEqual(Device.objects.get(pk=device_id).serial_number, "DEV-1")

    def test_update_missing_device_returns_404(self):
        response = self.client.put("/api/devices/99999", {"deviceType": "THERMOSTAT"})

        self.assertEqual(response.status_code, 404)

    def test_update_without_device_type_returns_400(self):
        device_id = self.register().data["id"]

        response = self.client.put(f"/api/devices/{device_id}", {"serialNumber": "DEV-9"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["deviceType"][0], "Device type is required")

    def test_update_status(self):
        device_id = self.register().data["id"]

        response = self.client.patch(f"/api/devices/{device_id}/status", {"status": "INACTIVE"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "INACTIVE")

    def test_update_status_of_missing_device_returns_404(self):
        response = self.client.patch("/api/devices/99999/status", {"status": "MAINTENANCE"})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(Device.objects.count(), 0)

    def test_update_status_requires_known_value(self):
        device_id = self.register().data["id"]

        missing = self.client.patch(f"/api/devices/{device_id}/status", {})
        unknown = self.client.patch(f"/api/devices/{device_id}/status", {"status": "BROKEN"})

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.data["status"][0], "Status is required")
        self.assertEqual(unknown.status_code, 400)

    def test_delete_device_twice(self):
        device_id = self.register().data["id"]

        first = self.client.delete(f"/api/devices/{device_id}")
        second = self.client.delete(f"/api/devices/{device_id}")

        self.assertEqual(first.status_code, 204)
        self.assertEqual(second.status_code, 404)

    def test_storage_failure_returns_503(self):
        with mock.patch.object(
            DeviceRegistry, "list_all", side_effect=DatabaseError("connection refused"),
        ):
            response = self.client.get("/api/devices")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data["error"], "Storage unavailable.")


class ReadingEndpointTest(TestCase):
    """Tests for /api/devices/<id>/readings and its latest/average views."""

    def setUp(self):
        self.client = APIClient()
        response = self.client.post("/api/devices", {
            "serialNumber": "DEV-1",
            "deviceType": "SMART_METER",
        })
        self.device_id = response.data["id"]
        self.base = f"/api/devices/{self.device_id}/readings"

    def test_record_reading_scenario(self):
        registered = Device.objects.get(pk=self.device_id).last_report_time

        response = self.client.post(self.base, {"value": 120.5})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["deviceId"], self.device_id)
        self.assertEqual(response.data["deviceSerialNumber"], "DEV-1")
        self.assertEqual(response.data["value"], 120.5)
        self.assertEqual(
            set(response.data), {"id", "deviceId", "deviceSerialNumber", "value", "timestamp"},
        )
        reading = EnergyReading.objects.get(pk=response.data["id"])
        self.assertGreaterEqual(reading.timestamp, registered)

        device = self.client.get(f"/api/devices/{self.device_id}")
        self.assertEqual(device.data["lastEnergyReading"], 120.5)

    def test_record_non_positive_value_returns_400(self):
        for value in (0, -5.0):
            response = self.client.post(self.base, {"value": value})

            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.data["value"][0], "Energy reading must be positive")

        self.assertEqual(EnergyReading.objects.count(), 0)

    def test_record_missing_value_returns_400(self):
        response = self.client.post(self.base, {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["value"][0], "Energy reading value is required")

    def test_record_for_missing_device_returns_404(self):
        response = self.client.post("/api/devices/99999/readings", {"value": 10.0})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(EnergyReading.objects.count(), 0)

    def test_readings_in_range(self):
        device = Device.objects.get(pk=self.device_id)
        inside = EnergyReading.objects.create(device=device, energy_consumed=1.0, timestamp=at(10))
        EnergyReading.objects.create(device=device, energy_consumed=2.0, timestamp=at(14))

        response = self.client.get(self.base, {
            "startDate": at(9).isoformat(),
            "endDate": at(12).isoformat(),
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r["id"] for r in response.data], [inside.id])

    def test_readings_range_accepts_naive_datetimes(self):
        device = Device.objects.get(pk=self.device_id)
        EnergyReading.objects.create(device=device, energy_consumed=1.0, timestamp=at(10))

        response = self.client.get(self.base, {
            "startDate": "2026-01-15T09:00:00",
            "endDate": "2026-01-15T11:00:00",
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

    def test_readings_range_requires_both_dates(self):
        response = self.client.get(self.base, {"startDate": "2026-01-15T09:00:00"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("endDate", response.data)

    def test_readings_range_rejects_bad_dates(self):
        response = self.client.get(self.base, {"startDate": "yesterday", "endDate": "today"})

        self.assertEqual(response.status_code, 400)

    def test_readings_for_missing_device_is_empty_list(self):
        response = self.client.get("/api/devices/99999/readings", {
            "startDate": at(0).isoformat(),
            "endDate": at(23).isoformat(),
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, [])

    def test_latest_reading(self):
        self.client.post(self.base, {"value": 10.0})
        self.client.post(self.base, {"value": 25.0})

        response = self.client.get(f"{self.base}/latest")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["value"], 25.0)

    def test_latest_without_readings_returns_404(self):
        response = self.client.get(f"{self.base}/latest")

        self.assertEqual(response.status_code, 404)

    def test_latest_for_missing_device_returns_404(self):
        response = self.client.get("/api/devices/99999/readings/latest")

        self.assertEqual(response.status_code, 404)

    def test_average_consumption(self):
        for value in (10.0, 20.0, 60.0):
            self.client.post(self.base, {"value": value})

        response = self.client.get(f"{self.base}/average")

        self.assertEqual(response.status_code, 200)
        self.assertAlmostEqual(response.data, 30.0)

    def test_average_without_readings_returns_404(self):
        response = self.client.get(f"{self.base}/average")

        self.assertEqual(response.status_code, 404)

    def test_deleting_device_removes_its_readings(self):
        self.client.post(self.base, {"value": 10.0})

        self.client.delete(f"/api/devices/{self.device_id}")

        self.assertEqual(EnergyReading.objects.count(), 0)
        self.assertEqual(self.client.get(f"{self.base}/average").status_code, 404)


class ApiDocumentationTest(TestCase):
    """Tests for the OpenAPI schema and Swagger UI."""

    def setUp(self):
        self.client = APIClient()

    def test_schema_lists_device_and_reading_paths(self):
        response = self.client.get("/v3/api-docs", {"format": "json"})

        self.assertEqual(response.status_code, 200)
        schema = response.json()
        self.assertEqual(schema["info"]["title"], "IoT Energy Monitoring API")
        self.assertEqual(schema["info"]["version"], "1.0")
        self.assertIn("/api/devices", schema["paths"])
        self.assertIn("/api/devices/{device_id}/readings/average", schema["paths"])

    def test_swagger_ui_is_served(self):
        response = self.client.get("/swagger-ui.html")

        self.assertEqual(response.status_code, 200)
