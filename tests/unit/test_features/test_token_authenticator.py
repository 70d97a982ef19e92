import pytest
from unittest.mock import Mock

from assistant.errors import AuthenticationError
from db.user import UserDB
from features.user import TokenAuthenticator


@pytest.fixture
def mock_user_db():
    return Mock(spec=UserDB)


@pytest.fixture
def authenticator(mock_user_db):
    return TokenAuthenticator(db=mock_user_db)


def test_valid_token_returns_filtered_user(authenticator, mock_user_db):
    mock_user_db.lookup_user_by_token.return_value = {
        "user_id": "user-1",
        "email": "ops@example.com",
        "status": "active",
        "api_token_hash": "abc",
    }

    user = authenticator.authenticate(" secret ")

    assert user["user_id"] == "user-1"
    assert "api_token_hash" not in user
    mock_user_db.lookup_user_by_token.assert_called_once_with("secret")


@pytest.mark.parametrize("token", [None, "", "   "])
def test_missing_token(authenticator, mock_user_db, token):
    with pytest.raises(AuthenticationError):
        authenticator.authenticate(token)
    mock_user_db.lookup_user_by_token.assert_not_called()


def test_unknown_token(authenticator, mock_user_db):
    mock_user_db.lookup_user_by_token.return_value = None
    with pytest.raises(AuthenticationError):
        authenticator.authenticate("nope")


def test_disabled_user(authenticator, mock_user_db):
    mock_user_db.lookup_user_by_token.return_value = {"user_id": "user-1", "status": "disabled"}
    with pytest.raises(AuthenticationError):
        authenticator.authenticate("secret")
