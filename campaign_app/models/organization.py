# campaign_app/models/organization.py

from .base import BaseModel, db


class Organization(BaseModel):
    """Tenant organization that texters and contacts belong to"""

    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)

    # Relationships
    users = db.relationship("UserOrganization", back_populates="organization", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Organization {self.name}>"
