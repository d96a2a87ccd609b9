from flask import Blueprint

photos = Blueprint('photos', __name__)

from ledshop.photos import routes  # noqa: F401, E402
# Registers the photos table with SQLAlchemy
from ledshop.photos import models  # noqa: F401, E402
