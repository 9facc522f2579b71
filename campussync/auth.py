"""Login, logout and the per-request principal.

Admins authenticate against the ``admin`` table by username; students and
faculty authenticate against their own tables by email. Which table is used
is decided by the login form (``portal``), never by guessing.
"""
import logging
import os

from flask import session
from werkzeug.security import check_password_hash, generate_password_hash

from campussync.errors import AuthFailure
from campussync.models import Admin
from campussync.principal import Principal, Role
from campussync.repositories import AdminRepository, FacultyRepository, StudentRepository

logger = logging.getLogger(__name__)

# Verified when the account does not exist so both failure paths cost one hash check.
_DUMMY_HASH = generate_password_hash('campussync-dummy-password')

_admins = AdminRepository()
_students = StudentRepository()
_faculty = FacultyRepository()


def hash_password(password):
    return generate_password_hash(password)


def _lookup(role, username):
    if role is Role.ADMIN:
        return _admins.find_by_username(username)
    if role is Role.STUDENT:
        return _students.find_by_email(username)
    return _faculty.find_by_email(username)


def login(portal, username, password):
    """Check credentials and return the matching ``Principal``.

    Raises ``AuthFailure`` for an unknown portal, an unknown account or a
    wrong password.
    """
    try:
        role = Role(portal)
    except ValueError:
        raise AuthFailure(f"Unknown login portal: {portal!r}") from None
    username = (username or '').strip()
    account = _lookup(role, username) if username else None
    if account is None:
        check_password_hash(_DUMMY_HASH, password or '')
        logger.info(f"Failed {role.value} login for {username!r}: no such account")
        raise AuthFailure("Invalid credentials")
    if not check_password_hash(account.password_hash, password or ''):
        logger.info(f"Failed {role.value} login for {username!r}: wrong password")
        raise AuthFailure("Invalid credentials")
    logger.info(f"{role.value} {username!r} logged in")
    return Principal(role=role, principal_id=account.id, username=username)


def start_session(principal):
    session.clear()
    session['logged_in'] = True
    session['role'] = principal.role.value
    session['user_id'] = principal.principal_id
    session['user'] = principal.username
    session.permanent = True


def current_principal():
    """Build the principal for this request from the session cookie, or None."""
    if not session.get('logged_in'):
        return None
    try:
        return Principal(
            role=Role(session.get('role')),
            principal_id=int(session.get('user_id')),
            username=session.get('user', ''),
        )
    except (TypeError, ValueError):
        logger.warning("Discarding malformed session data")
        return None


def end_session():
    session.clear()


def bootstrap_admin():
    """Create the admin account named by ADMIN_USERNAME if it does not exist."""
    admin_user = os.environ.get('ADMIN_USERNAME')
    if not admin_user:
        return None
    if _admins.find_by_username(admin_user):
        return None
    admin_pw_hash = os.environ.get('ADMIN_PASSWORD_HASH')
    admin_pw_plain = os.environ.get('ADMIN_PASSWORD')
    if not admin_pw_hash and admin_pw_plain:
        admin_pw_hash = hash_password(admin_pw_plain)
    if not admin_pw_hash:
        logger.warning(f"ADMIN_USERNAME={admin_user!r} set without ADMIN_PASSWORD or ADMIN_PASSWORD_HASH; skipping")
        return None
    return _admins.insert(Admin(username=admin_user, password_hash=admin_pw_hash))
