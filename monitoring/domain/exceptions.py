class DeviceNotFound(Exception):
    """Raised when an operation references a device id that does not exist."""

    def __init__(self, device_id):
        self.device_id = device_id
        super().__init__(f"Device {device_id} not found")


class DuplicateSerialNumber(Exception):
    """Raised when a registration or rename collides with an existing serial number."""

    def __init__(self, serial_number):
        self.serial_number = serial_number
        super().__init__(
            f"Device with serial number {serial_number} already exists"
        )
