from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from digital_library.errors import ConflictError, NotFoundError, UnauthorizedError
from digital_library.models.user import User
from digital_library.repositories.user_repo import UserRepo


class AuthService:
    def __init__(self, users: UserRepo = None):
        self.users = users or UserRepo()

    def register(self, username: str, email: str, password: str, role: str = "user"):
        if self.users.get_by_email(email):
            raise ConflictError("Email already exists")
        if self.users.get_by_username(username):
            raise ConflictError("Username already exists")

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role=role
        )
        return self.users.create(user)

    def login(self, email: str, password: str):
        user = self.users.get_by_email(email)
        if not user or not check_password_hash(user.password_hash, password):
            raise UnauthorizedError("Invalid email or password")

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username, "email": user.email}
        )
        return token, user

    def get_profile(self, user_id: int):
        user = self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
