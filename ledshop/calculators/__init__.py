from flask import Blueprint

drivers = Blueprint('drivers', __name__)

from ledshop.calculators import routes  # noqa: F401, E402
