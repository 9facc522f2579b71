from campussync import app, db
from campussync.auth import bootstrap_admin

with app.app_context():
    db.create_all()
    admin_id = bootstrap_admin()
    if admin_id:
        print(f"Created admin account (id={admin_id}).")
