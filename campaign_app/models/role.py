# campaign_app/models/role.py

from .base import BaseModel, db


class UserOrganization(BaseModel):
    """Junction table for User and Organization with the user's role in that organization"""

    __tablename__ = "user_organizations"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    role = db.Column(db.String(50), nullable=False)  # stored upper-case, e.g. ADMIN, TEXTER

    # Relationships
    user = db.relationship("User", back_populates="user_organizations")
    organization = db.relationship("Organization", back_populates="users")

    # No unique constraint on (user_id, organization_id): repeated provisioning
    # calls append a new link row each time.

    def __repr__(self):
        return f"<UserOrganization user={self.user_id} org={self.organization_id} role={self.role}>"
