from campussync import app
from campussync.auth import hash_password
from campussync.models import Admin
from campussync.repositories import AdminRepository
import secrets
import string


def generate_password(length: int = 16) -> str:
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


if __name__ == "__main__":
    new_pw = generate_password()
    with app.app_context():
        admins = AdminRepository()
        admin = admins.find_by_username('admin')
        if not admin:
            admins.insert(Admin(username='admin', password_hash=hash_password(new_pw)))
        else:
            admins.set_password(admin, hash_password(new_pw))
    # Print only the password for easy copying
    print(new_pw)
