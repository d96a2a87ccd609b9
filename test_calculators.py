import pytest
from decimal import Decimal
from ledshop import create_app, db
from ledshop.calculators import power, profile, recommendation
from ledshop.catalog import client as square_client, sync
from ledshop.catalog.sync import CatalogProduct


@pytest.fixture
def app():
    app = create_app(config_name='testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
    sync.clear_cache()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def _product(pid, name, voltage=None, price=None):
    attributes = {'environment': 'both'}
    if voltage:
        attributes['voltage'] = voltage
    return CatalogProduct(id=pid, name=name, price=price, attributes=attributes)


CATALOG = [
    _product('D60', 'LED Driver 60W', '24V', 45.0),
    _product('D100', 'LED Driver 100W', '24V', 65.0),
    _product('D300', 'Power Supply 300W', '24V', 140.0),
    _product('D12', 'LED Driver 150W', '12V', 80.0),
    _product('S1', 'LED Strip 5m', '24V', 30.0),
]


# ── Power ─────────────────────────────────────────────────────────

@pytest.mark.parametrize('label, expected', [
    ('SPOT FREE WHITE 3000K 8W/mtr IP20 24VDC', 8),
    ('LED NEON SIDEVIEW 4mmW x 8mmH WHITE 2700K 6W', 6),
    ('COB strip 14.4 W / m', 14.4),
    ('RGB tape, no wattage printed', 8),
    ('', 0),
    (None, 0),
])
def test_extract_watts_per_meter(label, expected):
    assert power.extract_watts_per_meter(label) == expected


def test_select_driver():
    assert power.select_driver(10).model == 'BNV-15-24'
    assert power.select_driver(40).model == 'BNV-40-24'
    assert power.select_driver(40.1).model == 'BNV-75-24'
    assert power.select_driver(1000).model == 'BNV-300-24'


def test_calculate_total_power():
    result = power.calculate_total_power(
        [{'length': 5, 'quantity': 2}, {'length': 2.5}],
        'SPOT FREE WHITE 3000K 8W/mtr IP20 24VDC',
    )
    assert result.total_length == 12.5
    assert result.total_watts == 100
    assert result.recommended_driver.model == 'BNV-150-24'
    assert result.to_dict()['requiredWatts'] == 120

    empty = power.calculate_total_power([], '8W/m')
    assert empty.total_watts == 0
    assert empty.recommended_driver is None


def test_calculate_route(client):
    resp = client.post('/api/drivers/calculate', json={
        'strips': [{'length': 3, 'quantity': 1}],
        'ledType': '11W/m',
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['totalWatts'] == 33
    assert data['recommendedDriver']['model'] == 'BNV-40-24'
    assert data['recommendedDriver']['specification'] == 'BNV-40-24 24VDC 1.67A'

    resp = client.post('/api/drivers/calculate', json={'strips': [{'length': -1}]})
    assert resp.status_code == 400
    assert 'strips.0.length' in resp.get_json()['details']


def test_specs_route(client):
    specs = client.get('/api/drivers/specs').get_json()
    assert [s['maxWatts'] for s in specs] == [15, 40, 75, 100, 150, 200, 300]
    assert power.get_driver_by_model('BNV-100-24').current == '4.17A'
    assert power.get_driver_by_model('BNV-999') is None


# ── Profile ───────────────────────────────────────────────────────

def test_profile_single_length():
    result = profile.calculate_profile_requirements(2.4, [], price_per_meter=12)
    assert result.base_meters == 3
    assert result.total_cuts == 1
    assert result.offcuts == [{'length': 0.6}]
    assert result.total_cutting_fees == Decimal('5.50')
    assert result.total_cost == Decimal('41.50')


def test_profile_multiple_cuts():
    result = profile.calculate_profile_requirements(
        0, [{'length': 1.2, 'quantity': 2}, {'length': 0.6, 'quantity': 1}],
        price_per_meter='10.00', cutting_fee_per_cut=4,
    )
    assert result.base_meters == 3
    assert result.total_cuts == 3
    assert result.offcuts == []
    assert result.total_cost == Decimal('42.00')


def test_profile_nothing_requested():
    result = profile.calculate_profile_requirements(0, [], price_per_meter=12)
    assert result.base_meters == 0
    assert result.total_cuts == 0
    assert result.total_cost == Decimal('0.00')


def test_profile_route(client):
    resp = client.post('/api/drivers/profile', json={
        'requiredLength': 1.5, 'pricePerMeter': 20,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['baseMeters'] == 2
    assert data['cuttingFee'] == 5.5
    assert data['totalCost'] == 45.5

    resp = client.post('/api/drivers/profile', json={
        'cutLengths': [{'length': 1}], 'pricePerMeter': 20,
    })
    assert resp.status_code == 400
    assert 'cutLengths.0.quantity' in resp.get_json()['details']


def test_format_length():
    assert profile.format_length(0.45) == '450mm'
    assert profile.format_length(2.5) == '2.50m'
    assert profile.format_length(2.5, unit='millimeters') == '2500mm'


# ── Catalog driver recommendation ─────────────────────────────────

def test_recommendation_prefers_smallest_within_double():
    rec = recommendation.calculate_driver_recommendation(70, '24V', products=CATALOG)
    # 84W required: 100W fits within 84..168, 300W is oversized
    assert rec.catalog_object_id == 'D100'
    assert rec.wattage == 100
    assert '(120% safety margin)' in rec.reason


def test_recommendation_falls_back_to_covering_driver():
    rec = recommendation.calculate_driver_recommendation(40, '24V', products=CATALOG)
    # 48W required: 60W fits within 48..96
    assert rec.catalog_object_id == 'D60'

    rec = recommendation.calculate_driver_recommendation(100, '24V', products=CATALOG)
    # 120W required: nothing within 120..240, smallest covering is 300W
    assert rec.catalog_object_id == 'D300'


def test_recommendation_largest_when_nothing_covers():
    rec = recommendation.calculate_driver_recommendation(400, '24V', products=CATALOG)
    assert rec.catalog_object_id == 'D300'
    assert 'may need multiple drivers' in rec.reason


def test_recommendation_without_drivers():
    assert recommendation.calculate_driver_recommendation(
        50, '24V', products=[_product('S1', 'LED Strip 5m')]) is None


def test_recommend_route_uses_catalog(client, monkeypatch):
    objects = [
        {'type': 'ITEM', 'id': 'D100', 'item_data': {
            'name': 'LED Driver 100W', 'description': 'Indoor 24V driver',
            'variations': [{'item_variation_data': {'price_money': {'amount': 6500}}}],
        }},
    ]
    monkeypatch.setattr(square_client, 'square_request',
                        lambda method, path, body=None: {'objects': objects})

    resp = client.post('/api/drivers/recommend', json={'totalWatts': 60, 'voltage': '24V'})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['catalogObjectId'] == 'D100'
    assert data['price'] == 65.0
    assert data['voltage'] == '24V'

    resp = client.post('/api/drivers/recommend', json={'totalWatts': 60, 'voltage': '48V'})
    assert resp.status_code == 400


def test_recommend_route_catalog_failure(client, monkeypatch):
    def failing_request(method, path, body=None):
        raise square_client.CatalogError('Square API unreachable: timeout')

    monkeypatch.setattr(square_client, 'square_request', failing_request)
    resp = client.post('/api/drivers/recommend', json={'totalWatts': 60, 'voltage': '12V'})
    assert resp.status_code == 500


def test_fourteen_watt_strip_sizing():
    result = power.calculate_total_power([{'length': 5}], 'COB 14.4W/m 24VDC')
    assert result.total_watts == pytest.approx(72)
    assert result.to_dict()['requiredWatts'] == pytest.approx(86.4)
    assert result.recommended_driver.model == 'BNV-100-24'


def test_calculate_strip_power():
    assert power.calculate_strip_power(2.5, 'SPOT FREE 8W/mtr') == 20
    assert power.calculate_strip_power(3, None) == 0


def test_extract_wattage_from_name_or_fallback():
    assert recommendation.extract_wattage(_product('D60', 'LED Driver 60W')) == 60
    assert recommendation.extract_wattage(_product('DX', 'Slim LED Driver')) == 100


def test_recommend_route_voltage_is_case_sensitive(client):
    resp = client.post('/api/drivers/recommend', json={'totalWatts': 60, 'voltage': '24v'})
    assert resp.status_code == 400
    assert resp.get_json()['details'] == {'voltage': 'Must be 12V or 24V.'}


@pytest.mark.parametrize('path', ['/api/drivers/calculate', '/api/drivers/profile',
                                  '/api/drivers/recommend'])
def test_calculator_routes_reject_non_object_bodies(client, path):
    for body in ([1], 'strips', 42):
        resp = client.post(path, json=body)
        assert resp.status_code == 400
        assert resp.get_json()['details'] == {'body': 'Expected object.'}
