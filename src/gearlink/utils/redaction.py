from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _address_map: dict[str, int] = field(default_factory=dict)
    _address_counter: int = 0

    def redact_address(self, address: str) -> str:
        """Mask the device half of a Bluetooth address, keeping the vendor prefix.

        The same address always maps to the same suffix within one redactor.
        """
        if not self.enabled:
            return address
        parts = address.split(":")
        if len(parts) != 6:
            return address
        prefix = ":".join(parts[:3])
        counter = self._address_map.get(address)
        if counter is None:
            self._address_counter += 1
            counter = self._address_counter
            self._address_map[address] = counter
        return f"{prefix}:xx:xx:{counter:02d}"

    def redact_id(self, device_id: str) -> str:
        if ":" in device_id:
            return self.redact_address(device_id)
        return device_id
