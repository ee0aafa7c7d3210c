from typing import Tuple

from app.schemas.user import User


# Usuarios de ejemplo, fijos durante toda la vida del proceso
SEED_USERS: Tuple[User, ...] = (
    User(id=1, name="Alice", role="DevOps Engineer"),
    User(id=2, name="Bob", role="Developer"),
    User(id=3, name="Charlie", role="SRE"),
)
