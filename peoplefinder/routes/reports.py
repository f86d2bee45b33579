# peoplefinder/routes/reports.py

"""
Dashboard report feeds
"""

from dataclasses import asdict

from flask import current_app, jsonify

from peoplefinder.completion.errors import StorageError
from peoplefinder.services.completion_service import get_completion_service
from peoplefinder.services.profiles_report_service import ProfilesPercentageReport


def register_report_routes(app):
    """Register report routes"""

    @app.route("/api/reports/profiles-percentage", methods=["GET"])
    def api_profiles_percentage_report():
        """Share of profiles with a photo and with additional information"""
        report = ProfilesPercentageReport(get_completion_service())
        try:
            items = report.items()
        except StorageError as e:
            current_app.logger.error(f"Error building profiles percentage report: {str(e)}")
            return jsonify({"error": "Report is temporarily unavailable"}), 503

        return jsonify({"fields": [asdict(field) for field in report.fields()], "items": items})
