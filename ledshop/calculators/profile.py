"""
ledshop/calculators/profile.py
------------------------------
Aluminium profile sold by the metre, cut to length for a flat fee per cut.

All requested pieces are cut from one continuous run of whole metres:
  base_meters = ceil(total requested length)
  cuts        = one per requested piece (one for a plain length)
  offcut      = base_meters - total, when positive
"""
import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List

Q = Decimal('0.01')
DEFAULT_CUTTING_FEE = Decimal('5.50')
LENGTH_PRECISION = 3     # millimetre precision, in metres


@dataclass
class ProfileCalculation:
    base_meters:        int
    cuts:               List[dict]
    cutting_fee:        Decimal
    offcuts:            List[dict] = field(default_factory=list)
    total_cutting_fees: Decimal = Decimal('0')
    total_cost:         Decimal = Decimal('0')

    @property
    def total_cuts(self) -> int:
        return sum(cut['quantity'] for cut in self.cuts)

    def to_dict(self) -> dict:
        return {
            'baseMeters':       self.base_meters,
            'cuts':             self.cuts,
            'totalCuts':        self.total_cuts,
            'cuttingFee':       float(self.cutting_fee),
            'offcuts':          self.offcuts,
            'totalCuttingFees': float(self.total_cutting_fees),
            'totalCost':        float(self.total_cost),
        }


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Q, rounding=ROUND_HALF_UP)


def calculate_profile_requirements(required_length: float, cut_lengths: List[dict],
                                   price_per_meter, cutting_fee_per_cut=DEFAULT_CUTTING_FEE
                                   ) -> ProfileCalculation:
    """
    cut_lengths: [{'length': metres, 'quantity': n}]. When empty, the order is
    one piece of required_length.
    """
    if cut_lengths:
        cuts = [{'length': c['length'], 'quantity': c['quantity']} for c in cut_lengths]
    elif required_length > 0:
        cuts = [{'length': required_length, 'quantity': 1}]
    else:
        cuts = []

    total_length = round(sum(c['length'] * c['quantity'] for c in cuts), LENGTH_PRECISION)
    base_meters = math.ceil(total_length)

    offcut = round(base_meters - total_length, LENGTH_PRECISION)
    offcuts = [{'length': offcut}] if offcut > 0 else []

    fee = _money(cutting_fee_per_cut)
    result = ProfileCalculation(
        base_meters=base_meters,
        cuts=cuts,
        cutting_fee=fee,
        offcuts=offcuts,
    )
    result.total_cutting_fees = (fee * result.total_cuts).quantize(Q)
    result.total_cost = (_money(price_per_meter) * base_meters + result.total_cutting_fees).quantize(Q)
    return result


def format_length(length: float, unit: str = 'meters') -> str:
    """Short lengths and millimetre requests print as whole mm, others as metres."""
    if unit == 'millimeters' or length < 1:
        return f'{round(length * 1000)}mm'
    return f'{length:.2f}m'
