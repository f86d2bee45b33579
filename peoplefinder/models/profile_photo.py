# peoplefinder/models/profile_photo.py

from .base import BaseModel, db


class ProfilePhoto(BaseModel):
    """Uploaded profile photo. Replaces the legacy ``people.image`` column."""

    __tablename__ = "profile_photos"

    id = db.Column(db.Integer, primary_key=True)
    image = db.Column(db.String(255), nullable=True)

    person = db.relationship("Person", back_populates="profile_photo", uselist=False)

    def __repr__(self):
        return f"<ProfilePhoto {self.id} {self.image}>"
