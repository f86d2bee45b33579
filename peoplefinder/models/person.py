# peoplefinder/models/person.py
"""
Person model: the record whose profile completion is scored.
"""

from .base import BaseModel, db


class Person(BaseModel):
    """A profile in the people directory"""

    __tablename__ = "people"

    id = db.Column(db.Integer, primary_key=True)

    # Name and contact details
    given_name = db.Column(db.String(100), nullable=True)
    surname = db.Column(db.String(100), nullable=True, index=True)
    email = db.Column(db.String(255), nullable=True, unique=True, index=True)
    primary_phone_number = db.Column(db.String(50), nullable=True)

    # Location
    building = db.Column(db.String(200), nullable=True)
    location_in_building = db.Column(db.String(200), nullable=True)
    city = db.Column(db.String(100), nullable=True)

    # Additional information
    description = db.Column(db.Text, nullable=True)
    current_project = db.Column(db.String(200), nullable=True)

    # Photo: profile_photo_id is the current representation, image is the
    # legacy file name kept until every profile has been migrated.
    profile_photo_id = db.Column(db.Integer, db.ForeignKey("profile_photos.id"), nullable=True)
    image = db.Column(db.String(255), nullable=True)

    profile_photo = db.relationship("ProfilePhoto", back_populates="person")
    memberships = db.relationship("Membership", back_populates="person", cascade="all, delete-orphan")
    groups = db.relationship("Group", secondary="memberships", viewonly=True)

    def __repr__(self):
        return f"<Person {self.email}>"

    @property
    def name(self):
        return " ".join(part for part in (self.given_name, self.surname) if part)

    def profile_photo_present(self):
        """True when either photo representation is populated, by the same rule the store scores with"""
        from peoplefinder.services.completion_service import get_completion_service

        registry = get_completion_service().policy.registry
        return bool(registry.is_present(registry.get("profile_photo"), self))

    def completion_score(self):
        """Completion score (0-100) computed by the store, see CompletionService"""
        from peoplefinder.services.completion_service import get_completion_service

        return get_completion_service().score_for(self.id)

    def is_complete(self):
        from peoplefinder.services.completion_service import get_completion_service

        return get_completion_service().is_complete(self.id)

    def is_incomplete(self):
        return not self.is_complete()

    def needed_for_completion(self, field_name):
        """Whether ``field_name`` still has to be filled in for this profile"""
        from peoplefinder.services.completion_service import get_completion_service

        return get_completion_service().needed_for_completion(self, field_name)
