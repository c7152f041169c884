"""Builders for boards and components used across the test modules."""

from protobuddy_mcp.cache import CacheUnavailableError
from protobuddy_mcp.models import Board, BoardPin, Component, ComponentPin, Dimensions, ProtocolRequirement


def digital_pins(count: int, serial: int = 2) -> tuple[BoardPin, ...]:
    """``count`` digital pins; the first ``serial`` of them also carry UART."""
    return tuple(
        BoardPin(
            number=i,
            name=f"D{i}",
            functions=("digital", "UART") if i < serial else ("digital",),
            digital_pin=i,
        )
        for i in range(count)
    )


def analog_pins(count: int, start: int = 14) -> tuple[BoardPin, ...]:
    return tuple(
        BoardPin(number=start + i, name=f"A{i}", functions=("analog",), analog_pin=i)
        for i in range(count)
    )


def make_board(**overrides) -> Board:
    """A 5V board with 14 digital pins, 6 analog pins, 20mA per pin and 200mA total."""
    fields = dict(
        id="test-board",
        name="Test Board",
        io_voltage=5.0,
        operating_voltage=5.0,
        current_per_pin=20.0,
        current_total=200.0,
        supported_protocols=("I2C", "SPI", "UART", "PWM"),
        pins=digital_pins(14) + analog_pins(6),
    )
    fields.update(overrides)
    return Board(**fields)


def pin(number: int, pin_type: str = "digital", name: str = "") -> ComponentPin:
    return ComponentPin(number=number, name=name or f"P{number}", type=pin_type)


def make_component(**overrides) -> Component:
    """A component that fits make_board() without any issue."""
    fields = dict(
        id="test-part",
        name="Test Part",
        voltage_min=3.3,
        voltage_max=5.5,
        current_max=5.0,
        pins=(pin(1),),
    )
    fields.update(overrides)
    return Component(**fields)


def onewire_sensor(**overrides) -> Component:
    """Component that needs OneWire, which make_board() lacks."""
    fields = dict(
        id="dht22",
        name="DHT22 Temperature Sensor",
        voltage_min=3.3,
        voltage_max=6.0,
        current_max=2.5,
        protocols=(ProtocolRequirement(type="OneWire"),),
        pins=(pin(1, "communication", "DATA"), pin(2, "digital", "SIG")),
    )
    fields.update(overrides)
    return make_component(**fields)


def ultrasonic_sensor(**overrides) -> Component:
    """Component that fits make_board() exactly."""
    fields = dict(
        id="hc-sr04",
        name="HC-SR04 Ultrasonic Sensor",
        voltage_min=5.0,
        voltage_max=5.0,
        current_max=15.0,
        protocols=(ProtocolRequirement(type="GPIO", pins=("trigger", "echo")),),
        pins=(pin(1, name="TRIG"), pin(2, name="ECHO")),
        dimensions=Dimensions(length=45, width=20, height=15),
    )
    fields.update(overrides)
    return make_component(**fields)


class FailingBackend:
    """Cache backend whose every call fails, like an unreachable cache server."""

    async def get(self, key):
        raise CacheUnavailableError("connection refused")

    async def set(self, key, value, ttl_seconds):
        raise CacheUnavailableError("connection refused")

    async def delete(self, key):
        raise CacheUnavailableError("connection refused")
