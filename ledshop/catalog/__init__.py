from flask import Blueprint

catalog = Blueprint('catalog', __name__)

from ledshop.catalog import routes  # noqa: F401, E402
