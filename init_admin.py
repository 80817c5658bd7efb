import os

from dotenv import load_dotenv

from automarket.config import Settings
from automarket.database import build_engine, build_session_factory
from automarket.models import Base, Users


# ======================================================
# ENV
# ======================================================

load_dotenv()

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_FIRST_NAME = os.getenv("ADMIN_FIRST_NAME", "Admin")
ADMIN_LAST_NAME = os.getenv("ADMIN_LAST_NAME")


# ======================================================
# MAIN LOGIC
# ======================================================

def ensure_admin(session_factory, email: str, first_name: str = "Admin", last_name: str | None = None) -> str:
    """Create the admin or grant the role. Returns what was done."""
    email = email.strip().lower()

    db = session_factory()
    try:
        user = db.query(Users).filter(Users.email == email).first()

        if not user:
            db.add(Users(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role="admin",
            ))
            result = "created"
        elif user.role != "admin" or not user.is_active:
            user.role = "admin"
            user.is_active = 1
            result = "granted"
        else:
            result = "exists"

        db.commit()
        return result
    finally:
        db.close()


def main():
    if not ADMIN_EMAIL:
        raise RuntimeError("ADMIN_EMAIL is not set")

    engine = build_engine(Settings().resolved_database_url)
    Base.metadata.create_all(bind=engine)

    result = ensure_admin(build_session_factory(engine), ADMIN_EMAIL, ADMIN_FIRST_NAME, ADMIN_LAST_NAME)
    engine.dispose()

    messages = {
        "created": f"[BOOTSTRAP] Admin created ({ADMIN_EMAIL})",
        "granted": f"[BOOTSTRAP] Admin role granted ({ADMIN_EMAIL})",
        "exists": "[BOOTSTRAP] Admin already exists, nothing to do",
    }
    print(messages[result])


# ======================================================
# ENTRYPOINT
# ======================================================

if __name__ == "__main__":
    main()
