from flask import Blueprint

points      = Blueprint('points', __name__)
points_shop = Blueprint('points_shop', __name__)
leaderboard = Blueprint('leaderboard', __name__)

from ledshop.points import routes  # noqa: F401, E402
# Registers the points tables with SQLAlchemy
from ledshop.points import models  # noqa: F401, E402
