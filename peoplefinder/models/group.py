# peoplefinder/models/group.py
"""
Group and membership models. A person counts as having "groups" when at
least one membership row references them.
"""

from sqlalchemy import Index

from .base import BaseModel, db


class Group(BaseModel):
    """Team or organisational unit people can belong to"""

    __tablename__ = "groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)

    memberships = db.relationship("Membership", back_populates="group", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Group {self.name}>"


class Membership(BaseModel):
    """Junction table between people and groups"""

    __tablename__ = "memberships"

    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey("people.id"), nullable=False)
    group_id = db.Column(db.Integer, db.ForeignKey("groups.id"), nullable=False)
    role = db.Column(db.String(200), nullable=True)

    person = db.relationship("Person", back_populates="memberships")
    group = db.relationship("Group", back_populates="memberships")

    __table_args__ = (Index("idx_membership_person", "person_id"),)

    def __repr__(self):
        return f"<Membership person={self.person_id} group={self.group_id}>"
