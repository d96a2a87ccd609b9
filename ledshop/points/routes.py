from flask import request, jsonify, g, current_app

from ledshop.auth.decorators import login_required
from ledshop.points import points, points_shop, leaderboard
from ledshop.points.models import PointsShopItem, PointsRedemption
from ledshop.points.service import (
    RedemptionError, award_visit_points, get_user_points,
    get_points_transactions, redeem_item, get_leaderboard,
)
from ledshop.utils.validation import invalid_input, is_int, json_body


def _limit_arg(default: int) -> int:
    limit = request.args.get('limit', type=int)
    return limit if limit and limit > 0 else default


# ── /api/points ───────────────────────────────────────────────────

@points.route('/visit', methods=['POST'])
@login_required
def visit():
    """Daily visit point (at most one per 24h)."""
    result = award_visit_points(g.user_id)
    if result['awarded']:
        current_app.logger.info(f"Visit point awarded to user {g.user_id}")
    return jsonify(result)


@points.route('/', methods=['GET'], strict_slashes=False)
@points.route('/balance', methods=['GET'])
@login_required
def balance():
    return jsonify(get_user_points(g.user_id))


@points.route('/transactions', methods=['GET'])
@login_required
def transactions():
    rows = get_points_transactions(g.user_id, limit=_limit_arg(50))
    return jsonify([t.to_dict() for t in rows])


# ── /api/points-shop ──────────────────────────────────────────────

@points_shop.route('/items', methods=['GET'])
def items():
    """Public: active items, cheapest first."""
    rows = (PointsShopItem.query
            .filter_by(active=True)
            .order_by(PointsShopItem.point_cost.asc(), PointsShopItem.id)
            .all())
    return jsonify([i.to_dict() for i in rows])


@points_shop.route('/redeem', methods=['POST'])
@login_required
def redeem():
    data, failure = json_body()
    if failure:
        return failure
    if not is_int(data.get('itemId')):
        return invalid_input({'itemId': 'Expected integer.'})

    try:
        result = redeem_item(g.user_id, data['itemId'])
    except RedemptionError as e:
        current_app.logger.warning(f"Redemption refused for user {g.user_id}: {e}")
        return jsonify({'error': str(e)}), e.status_code
    return jsonify(result)


@points_shop.route('/redemptions', methods=['GET'])
@login_required
def redemptions():
    rows = (PointsRedemption.query
            .filter_by(user_id=g.user_id)
            .order_by(PointsRedemption.created_at.desc(), PointsRedemption.id.desc())
            .all())
    return jsonify([r.to_dict() for r in rows])


# ── /api/leaderboard ──────────────────────────────────────────────

@leaderboard.route('/', methods=['GET'], strict_slashes=False)
def ranking():
    return jsonify(get_leaderboard(limit=_limit_arg(100)))
