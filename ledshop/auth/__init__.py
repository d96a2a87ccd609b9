from flask import Blueprint

auth = Blueprint('auth', __name__)

from ledshop.auth import routes   # noqa: F401, E402
# Registers the users table with SQLAlchemy
from ledshop.auth import models  # noqa: F401, E402
