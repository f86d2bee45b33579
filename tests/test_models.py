"""Tests for people directory models"""

from peoplefinder.models import Group, Membership, Person, ProfilePhoto, db


class TestPersonModel:
    """Tests for Person helpers"""

    def test_name(self):
        assert Person(given_name="Ada", surname="Lovelace").name == "Ada Lovelace"
        assert Person(surname="Lovelace").name == "Lovelace"

    def test_profile_photo_present(self):
        assert Person(image="legacy.png").profile_photo_present()
        assert Person(profile_photo_id=3).profile_photo_present()
        assert not Person(image="").profile_photo_present()
        assert not Person().profile_photo_present()

    def test_profile_photo_present_counts_zero_like_the_store(self, completion_service):
        # a zero id casts to the text "0", which the store counts as present
        person = Person(profile_photo_id=0)
        assert person.profile_photo_present()
        assert person.profile_photo_present() is not completion_service.needed_for_completion(
            person, "profile_photo_id"
        )

    def test_groups_through_memberships(self, test_group):
        person = Person(email="member@example.com")
        db.session.add(person)
        db.session.flush()
        db.session.add(Membership(person_id=person.id, group_id=test_group.id, role="Developer"))
        db.session.commit()

        assert [group.name for group in person.groups] == ["Digital Services"]
        assert test_group.memberships[0].person == person

    def test_profile_photo_relationship(self):
        photo = ProfilePhoto(image="face.png")
        person = Person(email="photo@example.com", profile_photo=photo)
        db.session.add(person)
        db.session.commit()

        assert person.profile_photo_id == photo.id
        assert photo.person == person

    def test_completion_helpers_delegate_to_service(self, make_complete_person):
        complete = make_complete_person("complete@example.com")
        partial = Person(email="partial@example.com")
        db.session.add(partial)
        db.session.commit()

        assert complete.completion_score() == 100
        assert complete.is_complete()
        assert not complete.is_incomplete()
        assert partial.completion_score() == 11
        assert partial.is_incomplete()

    def test_needed_for_completion(self, make_complete_person):
        person = make_complete_person("legacy@example.com")
        db.session.commit()

        assert not person.needed_for_completion("profile_photo_id")
        person.image = None
        assert person.needed_for_completion("profile_photo_id")
        assert not person.needed_for_completion("email")

    def test_repr(self):
        assert repr(Person(email="x@example.com")) == "<Person x@example.com>"
        assert repr(Group(name="Ops")) == "<Group Ops>"
