# Overview: Shared Flask-SQLAlchemy and Flask-Migrate instances; sessions are scoped per app context.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
