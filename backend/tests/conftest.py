import os
import sys
import pytest

# Ensure the backend root (containing the `guessroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guessroom.config import Config
from guessroom.game.models import Question
from guessroom.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    OPENAI_API_KEY = ''
    SOCKETIO_ASYNC_MODE = 'threading'
    TRUST_PROXY_HEADERS = False
    PUBLIC_BASE_URL = 'http://testserver'


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(app_and_socketio):
    flask_app, socketio = app_and_socketio
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


@pytest.fixture()
def question():
    return Question(question='How many players on a soccer team on the field?', answer=12, category='sports_numbers')

