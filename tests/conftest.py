import pytest

from github_fakes import FakeSession


@pytest.fixture
def fake_session():
    return FakeSession()
