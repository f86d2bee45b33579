"""Shared fixtures for route tests"""

import pytest

from peoplefinder.models import Membership, Person, db


@pytest.fixture
def directory_people(app, make_complete_person, test_group):
    """One complete profile, one partial profile and one empty profile"""
    complete = make_complete_person("complete@example.com")
    partial = Person(email="partial@example.com", given_name="Pat", city="Leeds", image="pat.png")
    empty = Person()
    db.session.add_all([partial, empty])
    db.session.flush()
    db.session.add(Membership(person_id=partial.id, group_id=test_group.id))
    db.session.commit()
    return complete, partial, empty
