"""Tests for the completion field registry"""

import pytest
from sqlalchemy import Column, Float, Integer, MetaData, String, Table, insert, select

from peoplefinder.completion import ConfigurationError, FieldKind, FieldRegistry, FieldSpec
from peoplefinder.completion.fields import DEFAULT_FIELD_SPECS, column_present, value_present
from peoplefinder.models import Group, Membership, Person, db


@pytest.fixture
def ratings_table(app):
    """Standalone table with numeric columns to check text-cast presence"""
    metadata = MetaData()
    table = Table(
        "ratings",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("stars", Integer, nullable=True),
        Column("weight", Float, nullable=True),
        Column("note", String(50), nullable=True),
    )
    metadata.create_all(db.engine)
    yield table
    metadata.drop_all(db.engine)


class TestFieldSpec:
    """Tests for FieldSpec constructors"""

    def test_scalar_defaults_column_to_name(self):
        spec = FieldSpec.scalar("city")
        assert spec.kind is FieldKind.SCALAR
        assert spec.columns == ("city",)

    def test_composite_keeps_column_priority(self):
        spec = FieldSpec.composite("profile_photo", "profile_photo_id", "image")
        assert spec.kind is FieldKind.COMPOSITE
        assert spec.columns == ("profile_photo_id", "image")

    def test_join_existence(self):
        spec = FieldSpec.join_existence("groups", "memberships", "person_id")
        assert spec.kind is FieldKind.JOIN_EXISTENCE
        assert spec.related_table == "memberships"
        assert spec.foreign_key == "person_id"

    def test_specs_are_immutable(self):
        spec = FieldSpec.scalar("city")
        with pytest.raises(AttributeError):
            spec.name = "town"


class TestFieldRegistryConstruction:
    """Tests for registry validation"""

    def test_default_registry(self, app):
        registry = FieldRegistry(Person.__table__)
        assert len(registry) == len(DEFAULT_FIELD_SPECS)
        assert "profile_photo" in registry
        assert registry.get("groups").kind is FieldKind.JOIN_EXISTENCE

    def test_unknown_field_lookup(self, registry):
        with pytest.raises(ConfigurationError, match="not registered"):
            registry.get("favourite_colour")

    def test_unknown_column(self, app):
        with pytest.raises(ConfigurationError, match="unknown column"):
            FieldRegistry(Person.__table__, [FieldSpec.scalar("favourite_colour")])

    def test_duplicate_registration(self, app):
        with pytest.raises(ConfigurationError, match="registered twice"):
            FieldRegistry(Person.__table__, [FieldSpec.scalar("city"), FieldSpec.scalar("city")])

    def test_scalar_with_several_columns(self, app):
        spec = FieldSpec(name="place", kind=FieldKind.SCALAR, columns=("city", "building"))
        with pytest.raises(ConfigurationError, match="exactly one column"):
            FieldRegistry(Person.__table__, [spec])

    def test_composite_without_columns(self, app):
        with pytest.raises(ConfigurationError, match="no backing column"):
            FieldRegistry(Person.__table__, [FieldSpec.composite("photo")])

    def test_unknown_related_table(self, app):
        spec = FieldSpec.join_existence("teams", "team_memberships", "person_id")
        with pytest.raises(ConfigurationError, match="unknown table"):
            FieldRegistry(Person.__table__, [spec])

    def test_unknown_foreign_key(self, app):
        spec = FieldSpec.join_existence("groups", "memberships", "member_id")
        with pytest.raises(ConfigurationError, match="unknown column"):
            FieldRegistry(Person.__table__, [spec])


class TestPresenceExpressions:
    """Presence evaluated by the store"""

    def _present_ids(self, registry, name):
        presence = registry.resolve_presence_expression(registry.get(name))
        rows = db.session.execute(select(Person.id).where(presence).order_by(Person.id)).all()
        return [row.id for row in rows]

    def test_scalar_null_and_empty_are_absent(self, registry):
        blank = Person(email="blank@example.com", city="")
        null = Person(email="null@example.com", city=None)
        filled = Person(email="filled@example.com", city="Leeds")
        db.session.add_all([blank, null, filled])
        db.session.commit()

        assert self._present_ids(registry, "city") == [filled.id]

    def test_whitespace_counts_as_present(self, registry):
        person = Person(email="space@example.com", city="  ")
        db.session.add(person)
        db.session.commit()

        assert self._present_ids(registry, "city") == [person.id]
        assert registry.is_present(registry.get("city"), person) is True

    def test_composite_uses_either_representation(self, registry):
        legacy = Person(email="legacy@example.com", image="old.png")
        neither = Person(email="neither@example.com", image="")
        db.session.add_all([legacy, neither])
        db.session.commit()

        assert self._present_ids(registry, "profile_photo") == [legacy.id]

    def test_composite_absence_requires_every_representation_blank(self, registry):
        legacy = Person(email="legacy@example.com", image="old.png")
        neither = Person(email="neither@example.com")
        db.session.add_all([legacy, neither])
        db.session.commit()

        absence = registry.resolve_absence_expression(registry.get("profile_photo"))
        rows = db.session.execute(select(Person.id).where(absence)).all()
        assert [row.id for row in rows] == [neither.id]

    def test_join_existence(self, registry):
        group = Group(name="Platform")
        member = Person(email="member@example.com")
        loner = Person(email="loner@example.com")
        db.session.add_all([group, member, loner])
        db.session.flush()
        db.session.add(Membership(person_id=member.id, group_id=group.id))
        db.session.commit()

        assert self._present_ids(registry, "groups") == [member.id]


class TestNumericPresence:
    """Zero-valued numbers are text-castable and therefore present"""

    def test_zero_values_are_present_and_null_is_absent(self, ratings_table):
        with db.engine.begin() as connection:
            connection.execute(
                insert(ratings_table),
                [
                    {"id": 1, "stars": 0, "weight": 0.0, "note": "0"},
                    {"id": 2, "stars": None, "weight": None, "note": None},
                    {"id": 3, "stars": 5, "weight": 1.5, "note": ""},
                ],
            )
            rows = connection.execute(
                select(
                    ratings_table.c.id,
                    column_present(ratings_table.c.stars).label("stars"),
                    column_present(ratings_table.c.weight).label("weight"),
                    column_present(ratings_table.c.note).label("note"),
                ).order_by(ratings_table.c.id)
            ).all()

        presence = {row.id: (bool(row.stars), bool(row.weight), bool(row.note)) for row in rows}
        assert presence[1] == (True, True, True)
        assert presence[2] == (False, False, False)
        assert presence[3] == (True, True, False)

    def test_value_present_matches_text_cast(self):
        assert value_present(0) is True
        assert value_present(0.0) is True
        assert value_present("0") is True
        assert value_present(False) is True
        assert value_present("") is False
        assert value_present(None) is False


class TestApplicationPresence:
    """Presence evaluated on already loaded records"""

    def test_mapping_record(self, registry):
        record = {"city": "York", "image": None, "profile_photo_id": 7}
        assert registry.is_present(registry.get("city"), record) is True
        assert registry.is_present(registry.get("building"), record) is False
        assert registry.is_present(registry.get("profile_photo"), record) is True

    def test_unloaded_relation_is_unknown(self, registry):
        assert registry.is_present(registry.get("groups"), {"city": "York"}) is None

    def test_loaded_relation(self, registry):
        assert registry.is_present(registry.get("groups"), {"groups": []}) is False
        assert registry.is_present(registry.get("groups"), {"groups": ["Platform"]}) is True
