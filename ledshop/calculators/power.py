"""
ledshop/calculators/power.py
----------------------------
LED strip power budget and driver sizing.

Watts per metre is read from the LED type label, e.g.
  "SPOT FREE WHITE 3000K 8W/mtr IP20 24VDC"         → 8
  "LED NEON SIDEVIEW 4mmW x 8mmH WHITE 2700K 6W"    → 6
The driver is the smallest stock model covering the load plus a 20% margin.
"""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

SAFETY_MARGIN = 1.2
DEFAULT_WATTS_PER_METER = 8


@dataclass(frozen=True)
class DriverSpec:
    model:     str
    voltage:   str
    current:   str
    max_watts: int

    @property
    def specification(self) -> str:
        return f'{self.model} {self.voltage} {self.current}'

    def to_dict(self) -> dict:
        return {
            'model':         self.model,
            'voltage':       self.voltage,
            'current':       self.current,
            'maxWatts':      self.max_watts,
            'specification': self.specification,
        }


# Ascending by max_watts
DRIVER_SPECS: List[DriverSpec] = [
    DriverSpec('BNV-15-24',  '24VDC', '0.625A', 15),
    DriverSpec('BNV-40-24',  '24VDC', '1.67A',  40),
    DriverSpec('BNV-75-24',  '24VDC', '3.125A', 75),
    DriverSpec('BNV-100-24', '24VDC', '4.17A',  100),
    DriverSpec('BNV-150-24', '24VDC', '6.25A',  150),
    DriverSpec('BNV-200-24', '24VDC', '8.33A',  200),
    DriverSpec('BNV-300-24', '24VDC', '12.5A',  300),
]

_WATT_PATTERNS = [
    re.compile(r'(\d+(?:\.\d+)?)\s*W/m', re.I),          # 8W/m, 8W/mtr
    re.compile(r'(\d+(?:\.\d+)?)\s*W\s*/\s*m', re.I),    # 8 W / m
    re.compile(r'(\d+(?:\.\d+)?)\s*W(?!/)', re.I),       # bare 6W
]

_KEYWORD_WATTS = [
    (('6w', 'neon'),       6),
    (('8w', 'spot free'),  8),
    (('11w',),             11),
    (('14.4w',),           14.4),
]


@dataclass
class PowerCalculation:
    total_watts:        float
    total_length:       float
    watts_per_meter:    float
    recommended_driver: Optional[DriverSpec]

    def to_dict(self) -> dict:
        return {
            'totalWatts':        self.total_watts,
            'totalLength':       self.total_length,
            'wattsPerMeter':     self.watts_per_meter,
            'requiredWatts':     round(self.total_watts * SAFETY_MARGIN, 2),
            'recommendedDriver': self.recommended_driver.to_dict() if self.recommended_driver else None,
        }


def extract_watts_per_meter(led_type: Optional[str]) -> float:
    """0 when there is no label; 8 when nothing in the label gives it away."""
    if not led_type:
        return 0
    for pattern in _WATT_PATTERNS:
        match = pattern.search(led_type)
        if match:
            return float(match.group(1))

    lowered = led_type.lower()
    for keywords, watts in _KEYWORD_WATTS:
        if any(k in lowered for k in keywords):
            return watts
    return DEFAULT_WATTS_PER_METER


def select_driver(required_watts: float) -> DriverSpec:
    """Smallest model with enough headroom, or the largest when none has."""
    for spec in DRIVER_SPECS:
        if spec.max_watts >= required_watts:
            return spec
    return DRIVER_SPECS[-1]


def calculate_total_power(strips: Iterable[dict], led_type: Optional[str]) -> PowerCalculation:
    """strips: [{'length': metres, 'quantity': n}]; quantity defaults to 1."""
    watts_per_meter = extract_watts_per_meter(led_type)
    total_length = 0.0
    total_watts = 0.0
    for strip in strips:
        strip_length = strip['length'] * strip.get('quantity', 1)
        total_length += strip_length
        total_watts += strip_length * watts_per_meter

    driver = select_driver(total_watts * SAFETY_MARGIN) if total_watts > 0 else None
    return PowerCalculation(
        total_watts=total_watts,
        total_length=total_length,
        watts_per_meter=watts_per_meter,
        recommended_driver=driver,
    )


def calculate_strip_power(length: float, led_type: Optional[str]) -> float:
    return length * extract_watts_per_meter(led_type)


def get_driver_by_model(model: str) -> Optional[DriverSpec]:
    return next((spec for spec in DRIVER_SPECS if spec.model == model), None)
