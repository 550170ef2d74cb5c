"""
Configuration for the Academy Desk application
"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
INSTANCE_DIR = os.path.join(BASE_DIR, 'instance')


def database_uri():
    database_url = os.environ.get('DATABASE_URL')
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    if database_url:
        return database_url
    # SQLite in the 'instance' folder for local use
    return f"sqlite:///{os.path.join(INSTANCE_DIR, 'academydesk.db')}"


class Config:
    # Flask
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')

    # Shared dashboard password
    ACADEMY_PASSWORD = os.environ.get('ACADEMY_PASSWORD', 'suhaspatilsir')

    # Database
    SQLALCHEMY_DATABASE_URI = database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    @staticmethod
    def init_app(app):
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
            os.makedirs(INSTANCE_DIR, exist_ok=True)


class ProductionConfig(Config):
    PREFERRED_URL_SCHEME = 'https'

    # Security
    SESSION_COOKIE_SECURE = True

    # Database
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 1800,  # Recycle connections after 30 minutes
    }

    @staticmethod
    def init_app(app):
        # The default password is public; production must set its own
        if not os.environ.get('ACADEMY_PASSWORD'):
            raise RuntimeError('ACADEMY_PASSWORD must be set in production')
        Config.init_app(app)
        if not os.environ.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = os.urandom(24)
            app.logger.warning('SECRET_KEY not set; using a random key for this process')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    ACADEMY_PASSWORD = 'letmein'
    LOG_LEVEL = 'DEBUG'

    @staticmethod
    def init_app(app):
        pass


CONFIGS = {
    'development': Config,
    'production': ProductionConfig,
    'testing': TestConfig,
}


def get_config(name=None):
    name = name or os.environ.get('FLASK_ENV', 'development')
    return CONFIGS.get(name, Config)
