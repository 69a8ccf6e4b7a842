"""Tests for report validation and normalization"""

import pytest

from compat_shared.schema import PERF_NOT_APPLICABLE, SCHEMA
from compat_shared.validation import validate_report


class TestValidReports:
    def test_halo_body_is_accepted(self, halo_body, today):
        result = validate_report(halo_body, source="app", today=today)

        assert result.ok
        assert result.error is None
        report = result.report
        assert report.title_id == "4D5307E6"
        assert report.title == "Halo 3"
        assert report.perf == "great"
        assert report.platform_label == "iOS"
        assert report.date == "2026-10-19"
        assert report.source == "app"

    def test_strings_are_trimmed_and_title_id_uppercased(self, halo_body, today):
        body = {
            **halo_body,
            "titleId": " 4d5307e6 ",
            "title": "  Halo 3 ",
            "device": " iPhone 15 Pro\t",
            "notes": "\nRuns full speed. ",
        }
        report = validate_report(body, today=today).report

        assert report.title_id == "4D5307E6"
        assert report.title == "Halo 3"
        assert report.device == "iPhone 15 Pro"
        assert report.notes == "Runs full speed."

    def test_optional_fields_are_kept(self, halo_body, today):
        body = {
            **halo_body,
            "tags": ["fps", "  ", 3, "co-op "],
            "resolution": "1080p",
            "framerate": "60fps",
            "screenshot": "https://cdn.example/shot.png",
            "submittedBy": "tester",
        }
        report = validate_report(body, today=today).report

        assert report.tags == ("fps", "co-op")
        assert report.resolution == "1080p"
        assert report.framerate == "60fps"
        assert report.screenshot == "https://cdn.example/shot.png"
        assert report.submitted_by == "tester"

    def test_macos_accepts_both_gpu_backends(self, halo_body, today):
        for backend in ("msl", "msc"):
            body = {**halo_body, "platform": "macos", "device": "MacBook Pro M3", "gpuBackend": backend}
            assert validate_report(body, today=today).ok


class TestPerfNotApplicable:
    def test_nothing_status_forces_na(self, halo_body, today):
        body = {**halo_body, "status": "nothing", "perf": "great"}
        report = validate_report(body, today=today).report

        assert report.status == "nothing"
        assert report.perf == PERF_NOT_APPLICABLE

    def test_nothing_status_without_perf_is_accepted(self, halo_body, today):
        body = {**halo_body, "status": "nothing"}
        body.pop("perf")

        assert validate_report(body, today=today).report.perf == PERF_NOT_APPLICABLE

    def test_na_with_a_running_status_is_rejected(self, halo_body, today):
        result = validate_report({**halo_body, "perf": "n/a"}, today=today)

        assert not result.ok
        assert "n/a" in result.error

    def test_missing_perf_is_rejected_for_running_status(self, halo_body, today):
        body = dict(halo_body)
        body.pop("perf")
        result = validate_report(body, today=today)

        assert not result.ok
        assert result.error.startswith("perf must be one of")


class TestInvalidReports:
    @pytest.mark.parametrize(
        "field, value, error",
        [
            ("titleId", "", "titleId is required"),
            ("title", "   ", "title is required"),
            ("status", "perfect", "status must be one of"),
            ("perf", "fast", "perf must be one of"),
            ("platform", "android", "platform must be one of"),
            ("device", None, "device is required"),
            ("osVersion", "", "osVersion is required"),
            ("arch", "riscv", "arch must be one of"),
            ("gpuBackend", "vulkan", "gpuBackend must be one of"),
            ("notes", "", "notes is required"),
        ],
    )
    def test_each_rule(self, halo_body, today, field, value, error):
        result = validate_report({**halo_body, field: value}, today=today)

        assert not result.ok
        assert result.report is None
        assert result.error.startswith(error)

    def test_ios_requires_msl(self, halo_body, today):
        result = validate_report({**halo_body, "gpuBackend": "msc"}, today=today)

        assert not result.ok
        assert result.error == "iOS platform only supports MSL GPU backend"

    def test_first_failure_wins(self, halo_body, today):
        body = {**halo_body, "title": "", "status": "bogus", "gpuBackend": "vulkan"}

        assert validate_report(body, today=today).error == "title is required"

    def test_enum_errors_list_schema_values(self, halo_body, today):
        result = validate_report({**halo_body, "status": "bogus"}, today=today)

        for option in SCHEMA["statuses"]:
            assert option["value"] in result.error

    @pytest.mark.parametrize("body", [None, [], "report", 42])
    def test_non_object_body(self, body, today):
        result = validate_report(body, today=today)

        assert not result.ok
        assert result.error == "Request body must be a JSON object"
