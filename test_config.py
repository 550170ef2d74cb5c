import pytest
from flask import Flask

from config import Config, ProductionConfig, TestConfig, get_config


def test_get_config_by_name():
    assert get_config('production') is ProductionConfig
    assert get_config('testing') is TestConfig
    assert get_config('unknown') is Config


def test_get_config_from_environment(monkeypatch):
    monkeypatch.setenv('FLASK_ENV', 'testing')
    assert get_config() is TestConfig


def test_production_requires_a_password(monkeypatch):
    monkeypatch.delenv('ACADEMY_PASSWORD', raising=False)
    with pytest.raises(RuntimeError, match='ACADEMY_PASSWORD'):
        ProductionConfig.init_app(Flask(__name__))


def test_production_random_secret_key_when_unset(monkeypatch):
    monkeypatch.setenv('ACADEMY_PASSWORD', 'a-real-password')
    monkeypatch.delenv('SECRET_KEY', raising=False)
    app = Flask(__name__)
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
    app.config['SECRET_KEY'] = 'dev-secret-key-change-me'
    ProductionConfig.init_app(app)
    assert app.config['SECRET_KEY'] != 'dev-secret-key-change-me'
