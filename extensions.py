"""Flask extension singletons, bound to the app in ``create_app``."""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf import CSRFProtect

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

login_manager = LoginManager()
# JSON API: без редиректа на страницу логина, 401 отдаёт auth.routes
login_manager.login_view = None
login_manager.session_protection = "basic"
