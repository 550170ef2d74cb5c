"""
Syntax and import checks for every application module
"""
import ast
import importlib
import os

import pytest

HERE = os.path.dirname(os.path.abspath(__file__))

MODULES = [
    'aggregates',
    'app',
    'app_models',
    'build',
    'config',
    'exports',
    'forms',
    'gunicorn_config',
    'health',
    'receipts',
    'reminders',
    'security',
    'shell',
    'store',
    'wsgi',
]

THIRD_PARTY = ['flask', 'flask_sqlalchemy', 'flask_wtf', 'wtforms', 'dotenv', 'fpdf', 'sqlalchemy']


@pytest.mark.parametrize('module', MODULES)
def test_syntax(module):
    with open(os.path.join(HERE, f'{module}.py'), 'r', encoding='utf-8') as f:
        ast.parse(f.read())


@pytest.mark.parametrize('name', THIRD_PARTY)
def test_dependencies_available(name):
    importlib.import_module(name)


def test_routes_registered():
    from app import create_app
    from config import TestConfig

    rules = {rule.rule for rule in create_app(TestConfig).url_map.iter_rules()}
    for path in ['/', '/login', '/logout', '/dashboard', '/students', '/reminders',
                 '/receipts', '/settings', '/health', '/api/summary']:
        assert path in rules
