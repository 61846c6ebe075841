import io

import pytest
from PIL import Image

import ledger
from accounts import issue_token, register_account
from main import create_app
from models import db, unit_of_work, Account
from scoring import Annotation
from task_catalog import create_task


class FakeLabeler:
    """Deterministic labeler; tests set `annotations` to whatever the photo 'shows'."""

    def __init__(self, annotations=()):
        self.annotations = list(annotations)
        self.calls = []

    def detect_labels(self, image_url):
        self.calls.append(image_url)
        return list(self.annotations)


def png_bytes(size=(8, 8), color=(34, 139, 34)):
    buf = io.BytesIO()
    Image.new('RGB', size, color).save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def labeler():
    return FakeLabeler([
        Annotation('tree', 0.90),
        Annotation('plant', 0.82),
        Annotation('environment', 0.75),
    ])


@pytest.fixture
def app(tmp_path, labeler):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'JWT_SECRET_KEYS': ['test-secret-key'],
        'RATELIMIT_ENABLED': False,
        'SEED_DEMO_TASKS': False,
        'LABELER': labeler,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def blob_store(app):
    return app.config['BLOB_STORE']


@pytest.fixture
def admin(app):
    return register_account('Ada Admin', 'admin@example.com', 'secret123', 'admin')


@pytest.fixture
def student(app):
    return register_account('Sam Student', 'sam@example.com', 'secret123', 'student')


@pytest.fixture
def sapling_task(app, admin):
    return create_task(admin.id, 'Plant a Sapling', 'Plant and water it', 'Plantation', 20, ['tree', 'plant', 'garden'])


def auth_headers(account):
    return {'Authorization': f'Bearer {issue_token(account)}'}


def points_of(account_id):
    db.session.expire_all()
    return db.session.get(Account, account_id).points


def badges_of(account_id):
    db.session.expire_all()
    return db.session.get(Account, account_id).badges


def give_points(account_id, amount):
    with unit_of_work():
        ledger.credit(account_id, amount)
