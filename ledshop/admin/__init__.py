from flask import Blueprint

admin = Blueprint('admin', __name__)

from ledshop.admin import orders, categories, products, users, points_shop  # noqa: F401, E402
