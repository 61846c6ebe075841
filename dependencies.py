"""
Configuration and shared collaborators for the EcoTask backend.
Settings come from the environment (a .env file is loaded first) and are
turned into the Flask config by default_config(); create_app() applies any
overrides on top, which is how tests swap in an in-memory database and a
fake labeler.
"""

import logging
import os
from dotenv import load_dotenv

from api.encryption_utils import get_jwt_secret_key
from blob_store import LocalBlobStore
from labeler import StubLabeler

load_dotenv()

DEV_JWT_SECRET = 'dev-secret-key-change-in-production'


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def load_jwt_secret_keys():
    """Signing keys in rotation order; the first one signs new tokens."""
    keys = [get_jwt_secret_key('CURRENT'), get_jwt_secret_key('PREVIOUS'), get_jwt_secret_key('NEXT')]
    keys = [key for key in keys if key]
    if not keys:
        logging.warning("JWT_SECRET_KEY not set in environment. Using insecure development key.")
        keys = [DEV_JWT_SECRET]
    return keys


def default_config():
    return {
        'SECRET_KEY': os.environ.get('SESSION_SECRET', DEV_JWT_SECRET),
        'SQLALCHEMY_DATABASE_URI': os.environ.get('DATABASE_URL', 'sqlite:///ecotask.db'),
        'SQLALCHEMY_ENGINE_OPTIONS': {'pool_pre_ping': True},
        'UPLOAD_FOLDER': os.environ.get('UPLOAD_FOLDER', 'uploads'),
        'MAX_CONTENT_LENGTH': 16 * 1024 * 1024,  # 16MB max upload
        'JWT_SECRET_KEYS': load_jwt_secret_keys(),
        'TOKEN_TTL_DAYS': int(os.environ.get('TOKEN_TTL_DAYS', 7)),
        'RATELIMIT_STORAGE_URI': os.environ.get('RATELIMIT_STORAGE_URI', 'memory://'),
        'SEED_DEMO_TASKS': _env_bool('SEED_DEMO_TASKS', True),
        'LABELER': None,
        'BLOB_STORE': None,
    }


def init_collaborators(app):
    """Fills in the labeler and blob store unless the config already provides them."""
    if app.config.get('LABELER') is None:
        app.config['LABELER'] = StubLabeler()
    if app.config.get('BLOB_STORE') is None:
        app.config['BLOB_STORE'] = LocalBlobStore(os.path.abspath(app.config['UPLOAD_FOLDER']))
