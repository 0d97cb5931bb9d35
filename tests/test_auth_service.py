from annotator_app.domains.configuration.models.config_models import AuthConfiguration
from annotator_app.domains.identity.services.auth_service import AuthService


def test_default_accounts_log_in_with_their_roles():
    auth = AuthService(AuthConfiguration.create_default())

    user = auth.login("user", "user")
    assert user.role == "user"
    assert not user.is_admin

    admin = auth.login(" admin ", "admin")
    assert admin.is_admin
    assert admin.to_dict() == {"isAuthenticated": True, "username": "admin", "role": "admin", "isAdmin": True}


def test_bad_credentials_return_none():
    auth = AuthService(AuthConfiguration.create_default())
    assert auth.login("admin", "wrong") is None
    assert auth.login("nobody", "user") is None
    assert auth.login("", "") is None
