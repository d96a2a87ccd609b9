"""
ledshop/calculators/recommendation.py
-------------------------------------
Pick a power supply from the live catalog for a given load.

Catalog items count as drivers when their name mentions driver, power
supply, transformer or adapter. Wattage is read from the name ("150W");
the preferred pick is the smallest driver between the required watts and
twice that, so the shop doesn't recommend a wildly oversized unit.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

from ledshop.catalog import sync
from ledshop.catalog.sync import CatalogProduct

DEFAULT_MARGIN = 1.2
DRIVER_KEYWORDS = ('driver', 'power supply', 'transformer', 'adapter')
FALLBACK_WATTAGE = 100

_WATTAGE_RE = re.compile(r'(\d+)\s*W', re.I)


@dataclass
class DriverRecommendation:
    catalog_object_id: str
    name:              str
    wattage:           float
    voltage:           str
    price:             Optional[float]
    reason:            str

    def to_dict(self) -> dict:
        return {
            'catalogObjectId': self.catalog_object_id,
            'name':            self.name,
            'wattage':         self.wattage,
            'voltage':         self.voltage,
            'price':           self.price,
            'reason':          self.reason,
        }


def is_driver(product: CatalogProduct) -> bool:
    name = product.name.lower()
    return any(keyword in name for keyword in DRIVER_KEYWORDS)


def extract_wattage(product: CatalogProduct) -> float:
    match = _WATTAGE_RE.search(product.name)
    if match:
        return int(match.group(1))
    return FALLBACK_WATTAGE


def is_voltage_compatible(product: CatalogProduct, voltage: str) -> bool:
    """
    Substring match either way. A driver with no voltage attribute matches
    every request, since the empty string is contained in any voltage.
    """
    driver_voltage = (product.attributes.get('voltage') or '').lower()
    wanted = voltage.lower()
    return driver_voltage in wanted or wanted in driver_voltage or driver_voltage == 'universal'


def _recommend(product: CatalogProduct, wattage: float, voltage: str,
               reason: str) -> DriverRecommendation:
    return DriverRecommendation(
        catalog_object_id=product.id,
        name=product.name,
        wattage=wattage,
        voltage=product.attributes.get('voltage') or voltage,
        price=product.price,
        reason=reason,
    )


def find_best_driver(candidates: List[CatalogProduct], required_watts: float,
                     voltage: str) -> Optional[DriverRecommendation]:
    """Smallest driver covering the load, else the largest one available."""
    if not candidates:
        return None
    rated = sorted(((extract_wattage(p), p) for p in candidates), key=lambda pair: pair[0])

    covering = [(w, p) for w, p in rated if w >= required_watts]
    if covering:
        wattage, product = covering[0]
        return _recommend(product, wattage, voltage,
                          f'Recommended {wattage}W driver for {required_watts:.1f}W system')

    wattage, product = max(rated, key=lambda pair: pair[0])
    return _recommend(
        product, wattage, voltage,
        f'Largest available driver ({wattage}W). System requires '
        f'{required_watts:.1f}W - may need multiple drivers.',
    )


def calculate_driver_recommendation(total_watts: float, voltage: str,
                                    safety_margin: float = None,
                                    products: List[CatalogProduct] = None
                                    ) -> Optional[DriverRecommendation]:
    """None when the catalog has no driver at all."""
    margin = safety_margin or DEFAULT_MARGIN
    required_watts = total_watts * margin

    if products is None:
        products = sync.get_cached_products()
    drivers = [p for p in products if is_driver(p)]
    if not drivers:
        return None

    compatible = [p for p in drivers if is_voltage_compatible(p, voltage)]
    if not compatible:
        return find_best_driver(drivers, required_watts, voltage)

    suitable = sorted(
        (p for p in compatible if required_watts <= extract_wattage(p) <= required_watts * 2),
        key=extract_wattage,
    )
    if suitable:
        driver = suitable[0]
        wattage = extract_wattage(driver)
        return _recommend(
            driver, wattage, voltage,
            f'Recommended {wattage}W driver for {total_watts:.1f}W system '
            f'({margin * 100:.0f}% safety margin)',
        )
    return find_best_driver(compatible, required_watts, voltage)
