from sqlalchemy import select

from digital_library.models.user import User
from digital_library.extensions import db


class UserRepo:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_username(self, username: str):
        return self.session.execute(select(User).filter_by(username=username)).scalar_one_or_none()

    def get_by_email(self, email: str):
        return self.session.execute(select(User).filter_by(email=email)).scalar_one_or_none()

    def get_by_id(self, user_id: int):
        return self.session.get(User, user_id)

    def create(self, user: User):
        self.session.add(user)
        self.session.commit()
        return user
