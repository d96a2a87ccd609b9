from flask import jsonify, current_app

from ledshop.calculators import drivers
from ledshop.calculators.recommendation import calculate_driver_recommendation
from ledshop.calculators.power import DRIVER_SPECS, calculate_total_power
from ledshop.calculators.profile import DEFAULT_CUTTING_FEE, calculate_profile_requirements
from ledshop.calculators.validators import validate_power, validate_profile, validate_recommendation
from ledshop.catalog.client import CatalogError
from ledshop.utils.validation import invalid_input, json_body


@drivers.route('/recommend', methods=['POST'])
def recommend():
    """A driver from the live catalog for the given load."""
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_recommendation(data)
    if errors:
        return invalid_input(errors)

    try:
        recommendation = calculate_driver_recommendation(
            total_watts=data['totalWatts'],
            voltage=data['voltage'],
            safety_margin=data.get('safetyMargin'),
        )
    except CatalogError as e:
        current_app.logger.error(f"Driver recommendation failed: {e}")
        return jsonify({'error': 'Failed to calculate driver recommendation'}), 500

    if recommendation is None:
        return jsonify({'error': 'No suitable driver found'}), 404
    return jsonify(recommendation.to_dict())


@drivers.route('/calculate', methods=['POST'])
def calculate():
    """Power budget and stock driver model for a set of strips."""
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_power(data)
    if errors:
        return invalid_input(errors)

    result = calculate_total_power(data['strips'], data.get('ledType'))
    return jsonify(result.to_dict())


@drivers.route('/profile', methods=['POST'])
def profile():
    data, failure = json_body()
    if failure:
        return failure
    errors = validate_profile(data)
    if errors:
        return invalid_input(errors)

    fee = data.get('cuttingFeePerCut')
    result = calculate_profile_requirements(
        required_length=data.get('requiredLength', 0),
        cut_lengths=data.get('cutLengths', []),
        price_per_meter=data['pricePerMeter'],
        cutting_fee_per_cut=DEFAULT_CUTTING_FEE if fee is None else fee,
    )
    return jsonify(result.to_dict())


@drivers.route('/specs', methods=['GET'])
def specs():
    return jsonify([spec.to_dict() for spec in DRIVER_SPECS])
