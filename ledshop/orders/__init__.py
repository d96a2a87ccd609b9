from flask import Blueprint

orders = Blueprint('orders', __name__)

from ledshop.orders import routes  # noqa: F401, E402
# Registers the orders table with SQLAlchemy
from ledshop.orders import models  # noqa: F401, E402
