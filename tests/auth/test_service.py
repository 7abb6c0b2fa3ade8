import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from gym_backend.auth import service
from gym_backend.auth.jwt_handler import TokenSettings, decode_access_token
from gym_backend.auth.passwords import hash_password, verify_password
from gym_backend.core.errors import AuthFailure, AuthFailureReason, ValidationFailure
from gym_backend.models.user import Role, User
from gym_backend.seed import seed_identity_store


def test_password_hash_round_trip() -> None:
    hashed = hash_password('secret1')

    assert hashed != 'secret1'
    assert verify_password('secret1', hashed)
    assert not verify_password('secret2', hashed)


@pytest.mark.parametrize('stored_hash', [None, '', 'not-a-bcrypt-hash'])
def test_unusable_stored_hash_never_matches(stored_hash) -> None:
    assert not verify_password('secret1', stored_hash)


def test_registered_identity_verifies_case_insensitively(db) -> None:
    service.register_identity(db, 'a@x.com', 'secret1')

    user = service.verify_credentials(db, 'A@X.COM', 'secret1')

    assert user.email.lower() == 'a@x.com'


def test_registration_assigns_only_the_user_role(db) -> None:
    user = service.register_identity(db, 'new@example.com', 'secret1')

    assert user.role_names == ['User']


def test_registration_rejects_duplicate_email_regardless_of_case(db) -> None:
    service.register_identity(db, 'dup@example.com', 'secret1')

    with pytest.raises(ValidationFailure) as exception_info:
        service.register_identity(db, 'DUP@example.com', 'secret1')

    assert 'email' in exception_info.value.errors


def test_registration_rejects_short_password(db) -> None:
    with pytest.raises(ValidationFailure) as exception_info:
        service.register_identity(db, 'short@example.com', 'abc')

    assert 'password' in exception_info.value.errors
    assert service.get_user_by_email(db, 'short@example.com') is None


def test_wrong_password_and_unknown_email_fail_identically(db) -> None:
    service.register_identity(db, 'known@example.com', 'secret1')

    with pytest.raises(AuthFailure) as wrong_password:
        service.verify_credentials(db, 'known@example.com', 'wrong-password')
    with pytest.raises(AuthFailure) as unknown_email:
        service.verify_credentials(db, 'nobody@example.com', 'secret1')

    assert wrong_password.value.reason is AuthFailureReason.INVALID_CREDENTIALS
    assert unknown_email.value.reason is wrong_password.value.reason
    assert str(unknown_email.value) == str(wrong_password.value)


def test_issued_roles_are_a_snapshot(db, token_settings: TokenSettings) -> None:
    user = service.register_identity(db, 'snap@example.com', 'secret1')
    issued = service.issue_token(user, token_settings)

    user.roles.append(service.get_or_create_role(db, 'Admin'))
    db.commit()

    assert decode_access_token(issued.token, token_settings)['roles'] == ['User']
    assert service.issue_token(user, token_settings).roles == ['Admin', 'User']


def test_issue_token_uses_identity_as_subject(db, token_settings: TokenSettings) -> None:
    user = service.register_identity(db, 'subject@example.com', 'secret1')

    claims = decode_access_token(service.issue_token(user, token_settings).token, token_settings)

    assert claims['sub'] == str(user.id)
    assert claims['email'] == 'subject@example.com'
    assert claims['name'] == 'subject@example.com'


def test_seed_is_idempotent_and_admin_only_has_admin_role(db) -> None:
    seed_identity_store(db, admin_email='admin@gym.com', admin_password='Admin@123')
    admin = seed_identity_store(db, admin_email='admin@gym.com', admin_password='Admin@123')

    assert db.scalar(select(func.count()).select_from(User)) == 1
    assert sorted(db.scalars(select(Role.name))) == ['Admin', 'User']
    assert admin.role_names == ['Admin']
    assert service.verify_credentials(db, 'admin@gym.com', 'Admin@123').id == admin.id


def test_unknown_email_still_checks_a_password_hash(db, monkeypatch) -> None:
    checked = []

    def spy(password, hashed_password):
        checked.append(hashed_password)
        return False

    monkeypatch.setattr(service, 'verify_password', spy)

    with pytest.raises(AuthFailure):
        service.verify_credentials(db, 'nobody@example.com', 'secret1')

    assert checked == [service._UNKNOWN_USER_HASH]


def test_registration_rejects_unencodable_password(db) -> None:
    with pytest.raises(ValidationFailure) as exception_info:
        service.register_identity(db, 'surrogate@example.com', 'abc\ud800defg')

    assert exception_info.value.errors['password'] == ['Password contains characters that cannot be encoded.']


def test_unrelated_integrity_error_is_not_reported_as_taken_email(db, monkeypatch) -> None:
    def fail_commit():
        raise IntegrityError('INSERT INTO roles', {}, Exception('UNIQUE constraint failed: roles.name'))

    monkeypatch.setattr(db, 'commit', fail_commit)

    with pytest.raises(IntegrityError):
        service.register_identity(db, 'fresh@example.com', 'secret1')
