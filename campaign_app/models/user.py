# campaign_app/models/user.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db


class User(BaseModel):
    """Platform user, optionally linked to an Auth0 identity"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    auth0_id = db.Column(db.String(255), nullable=True, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    cell = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    is_superadmin = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    user_organizations = db.relationship(
        "UserOrganization", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @staticmethod
    def find_by_email(email):
        """Find user by email with error handling"""
        try:
            return User.query.filter_by(email=email).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by email {email}: {str(e)}")
            return None
