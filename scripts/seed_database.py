# scripts/seed_database.py
"""
Database seeding script.
Populates the directory with people at varying levels of profile completion
so the completion dashboard has something to show in development.
"""

import argparse
import os
import random
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker  # noqa: E402

from app import create_app  # noqa: E402
from peoplefinder.models import Group, Membership, Person, ProfilePhoto, db  # noqa: E402

fake = Faker("en_GB")

GROUP_NAMES = ["Digital Services", "Finance", "Human Resources", "Legal", "Operations", "Policy"]
BUILDINGS = ["102 Petty France", "10 South Colonnade", "Clive House", "Quadrant House"]

# Chance that each optional attribute is filled in on a seeded profile
FILL_RATES = {
    "given_name": 0.98,
    "surname": 0.98,
    "email": 0.95,
    "primary_phone_number": 0.7,
    "building": 0.6,
    "location_in_building": 0.5,
    "city": 0.75,
    "description": 0.3,
    "current_project": 0.35,
    "photo": 0.55,
    "groups": 0.8,
}

stats = {"groups": 0, "people": 0, "photos": 0, "memberships": 0, "errors": []}


def _filled(field):
    return random.random() < FILL_RATES[field]


def clear_database(app):
    """Remove every seeded row"""
    print("Clearing existing data...")
    with app.app_context():
        try:
            Membership.query.delete()
            Person.query.delete()
            ProfilePhoto.query.delete()
            Group.query.delete()
            db.session.commit()
            print("✅ Database cleared")
        except Exception as e:
            db.session.rollback()
            print(f"❌ Error clearing database: {str(e)}")
            sys.exit(1)


def seed_groups(app, dry_run=False):
    """Create the teams people are placed in"""
    print("\n📝 Seeding groups...")

    if dry_run:
        print(f"  [DRY RUN] Would create {len(GROUP_NAMES)} groups")
        return []

    with app.app_context():
        groups = []
        for name in GROUP_NAMES:
            existing = Group.query.filter_by(name=name).first()
            if existing:
                print(f"  ⏭️  Group '{name}' already exists, skipping")
                groups.append(existing.id)
                continue
            group = Group(name=name)
            db.session.add(group)
            db.session.flush()
            groups.append(group.id)
            stats["groups"] += 1
        db.session.commit()
        print(f"  ✅ {stats['groups']} groups created")
        return groups


def seed_people(app, group_ids, count=100, batch_size=50, dry_run=False):
    """Create people with a random subset of their profile filled in"""
    print(f"\n📝 Seeding {count} people...")

    if dry_run:
        print(f"  [DRY RUN] Would create {count} people")
        return

    with app.app_context():
        pending = 0
        for _ in range(count):
            given_name = fake.first_name()
            surname = fake.last_name()
            person = Person(
                given_name=given_name if _filled("given_name") else None,
                surname=surname if _filled("surname") else None,
                email=fake.unique.email() if _filled("email") else None,
                primary_phone_number=fake.phone_number() if _filled("primary_phone_number") else None,
                building=random.choice(BUILDINGS) if _filled("building") else None,
                location_in_building=f"Floor {random.randint(1, 10)}" if _filled("location_in_building") else None,
                city=fake.city() if _filled("city") else None,
                description=fake.paragraph() if _filled("description") else None,
                current_project=fake.catch_phrase() if _filled("current_project") else None,
            )
            if _filled("photo"):
                # Older profiles carry the legacy image column instead of an uploaded photo
                if random.random() < 0.5:
                    person.profile_photo = ProfilePhoto(image=f"{fake.uuid4()}.jpg")
                    stats["photos"] += 1
                else:
                    person.image = f"{fake.uuid4()}.jpg"
            db.session.add(person)
            db.session.flush()

            if group_ids and _filled("groups"):
                for group_id in random.sample(group_ids, k=random.randint(1, min(2, len(group_ids)))):
                    db.session.add(Membership(person_id=person.id, group_id=group_id, role=fake.job()))
                    stats["memberships"] += 1

            stats["people"] += 1
            pending += 1
            if pending >= batch_size:
                try:
                    db.session.commit()
                except Exception as exc:  # noqa: BLE001 - surface commit issues during seeding
                    db.session.rollback()
                    stats["errors"].append(f"Batch commit failed: {exc}")
                    print(f"  ❌ Batch commit failed: {exc}")
                pending = 0

        db.session.commit()
        print(f"  ✅ {stats['people']} people created")


def seed_database(clear=False, count=100, dry_run=False):
    """Seed groups and people"""
    app = create_app(config_overrides={"CREATE_TABLES_ON_STARTUP": True})

    if clear and not dry_run:
        clear_database(app)

    group_ids = seed_groups(app, dry_run=dry_run)
    seed_people(app, group_ids, count=count, dry_run=dry_run)

    print("\n" + "=" * 50)
    print("Seeding summary")
    print("=" * 50)
    for key in ("groups", "people", "photos", "memberships"):
        print(f"  {key.title()}: {stats[key]}")

    if stats["errors"]:
        print(f"\n⚠️  {len(stats['errors'])} errors occurred:")
        for error in stats["errors"][:10]:
            print(f"  - {error}")
    else:
        print("\n✅ Seeding completed successfully!")

    if not dry_run:
        with app.app_context():
            service = app.extensions["completion_service"]
            print(f"\nAverage completion: {service.average_score()}%")
            print(f"Distribution: {service.bucketed_distribution()}")


def main():
    """Command-line interface"""
    parser = argparse.ArgumentParser(description="Seed the database with sample people")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing data before seeding",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=100,
        help="Number of people to create (default: 100)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without actually creating",
    )

    args = parser.parse_args()
    seed_database(clear=args.clear, count=args.count, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
