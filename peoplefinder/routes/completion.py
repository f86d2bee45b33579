# peoplefinder/routes/completion.py

"""
API routes for profile completion scores
"""

from flask import current_app, jsonify, request

from peoplefinder.completion.errors import NotFound, StorageError
from peoplefinder.models import Person, db
from peoplefinder.services.completion_service import get_completion_service

LISTING_COLUMNS = ("id", "given_name", "surname", "email")


def _parse_ids(raw):
    """Parse ``?ids=1,2,3``; returns None for a missing or blank parameter"""
    if raw is None or not raw.strip():
        return None
    ids = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        ids.append(int(item))
    return ids


def register_completion_routes(app):
    """Register completion API routes"""

    @app.route("/api/completion/people/<int:person_id>", methods=["GET"])
    def api_person_completion(person_id):
        """Score and missing fields for one profile"""
        service = get_completion_service()
        try:
            person = db.session.get(Person, person_id)
            if person is None:
                raise NotFound(person_id)
            score = service.score_for(person_id)
            missing = service.missing_fields_for(person_id, person)
        except NotFound:
            return jsonify({"error": f"Person {person_id} not found"}), 404
        except StorageError as e:
            current_app.logger.error(f"Error scoring person {person_id}: {str(e)}")
            return jsonify({"error": "Completion scores are temporarily unavailable"}), 503

        return jsonify(
            {
                "id": person_id,
                "score": score,
                "complete": score == 100,
                "missing_fields": [name for name in service.policy.full_fields if name in missing],
            }
        )

    @app.route("/api/completion/average", methods=["GET"])
    def api_average_completion():
        """Average score over every profile, or over ``?ids=`` when given"""
        try:
            ids = _parse_ids(request.args.get("ids"))
        except ValueError:
            return jsonify({"error": "ids must be a comma-separated list of integers"}), 400

        try:
            average = get_completion_service().average_score(ids)
        except StorageError as e:
            current_app.logger.error(f"Error computing average completion: {str(e)}")
            return jsonify({"error": "Completion scores are temporarily unavailable"}), 503

        return jsonify({"average": average, "ids": ids or []})

    @app.route("/api/completion/distribution", methods=["GET"])
    def api_completion_distribution():
        """Profile count per completion bucket"""
        try:
            distribution = get_completion_service().bucketed_distribution()
        except StorageError as e:
            current_app.logger.error(f"Error computing completion distribution: {str(e)}")
            return jsonify({"error": "Completion scores are temporarily unavailable"}), 503

        return jsonify({"buckets": distribution, "total": sum(distribution.values())})

    @app.route("/api/completion/fields", methods=["GET"])
    def api_field_completion():
        """Per-field completeness over every profile"""
        try:
            fields = get_completion_service().field_completeness()
        except StorageError as e:
            current_app.logger.error(f"Error computing field completeness: {str(e)}")
            return jsonify({"error": "Completion scores are temporarily unavailable"}), 503

        return jsonify(
            {
                "fields": [
                    {
                        "field_name": field.field_name,
                        "total_records": field.total_records,
                        "records_with_value": field.records_with_value,
                        "records_without_value": field.records_without_value,
                        "completeness_percentage": field.completeness_percentage,
                    }
                    for field in fields
                ]
            }
        )

    @app.route("/api/completion/inadequate", methods=["GET"])
    def api_inadequate_profiles():
        """Profiles missing an adequate field or a photo, ordered by email"""
        default_per_page = current_app.config.get("COMPLETION_PAGE_SIZE_DEFAULT", 25)
        max_per_page = current_app.config.get("COMPLETION_PAGE_SIZE_MAX", 100)
        page = request.args.get("page", 1, type=int)
        per_page = request.args.get("per_page", default_per_page, type=int)
        if page < 1 or per_page < 1:
            return jsonify({"error": "page and per_page must be positive integers"}), 400
        per_page = min(per_page, max_per_page)

        try:
            result = get_completion_service().inadequate_records(page=page, per_page=per_page)
        except StorageError as e:
            current_app.logger.error(f"Error listing inadequate profiles: {str(e)}")
            return jsonify({"error": "Completion scores are temporarily unavailable"}), 503

        return jsonify(
            {
                "items": [{key: item.get(key) for key in LISTING_COLUMNS} for item in result.items],
                "total": result.total,
                "page": result.page,
                "per_page": result.per_page,
                "pages": result.pages,
            }
        )
