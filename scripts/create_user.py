"""Create or update a verified user from the command line.

Usage: python scripts/create_user.py EMAIL PASSWORD
"""

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print(__doc__.strip().splitlines()[-1])
        return 2

    email, password = argv[0].strip().lower(), argv[1]
    app = create_app()
    with app.app_context():
        db.create_all()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email)
            db.session.add(user)
            action = "created"
        else:
            action = "updated"
        user.set_password(password)
        user.mark_verified()
        db.session.commit()
        print(f"User {action}: {email} (id={user.id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
