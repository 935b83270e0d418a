"""
End-to-end tests for the usage report pipeline.

Every run must end in exactly one terminal outcome and write at most one audit record.
"""

import httpx
import pytest

from charger_alerts.core.settings import RunOutcome
from charger_alerts.exceptions import DetectionServiceError, ResolutionError
from charger_alerts.pipeline import ChargerAlertPipeline, PipelineServices
from charger_alerts.schemas.usage_report import DetectionResult, UsageReport
from charger_alerts.services.notifications import ChargerAlertDispatcher

from conftest import (
    FakeDetector,
    FakeFirebase,
    FakeRegistry,
    FakeResolver,
    build_pipeline,
    run,
)

PLATE_RESULT = [{"plate": "ab12 cde", "score": 0.91}]


def create_report(image_url="gs://bucket/x.jpg", charger_id="C1", **kwargs) -> UsageReport:
    """Helper to create usage reports"""
    return UsageReport(image_url=image_url, charger_id=charger_id, **kwargs)


def fake_pipeline(detector=None, resolver=None, registry=None, firebase=None):
    registry = registry if registry is not None else FakeRegistry()
    firebase = firebase if firebase is not None else FakeFirebase()
    resolver = resolver or FakeResolver()
    detector = detector or FakeDetector(DetectionResult(plate="AB12CDE", confidence=0.91))
    services = PipelineServices(
        resolver=resolver,
        detector=detector,
        registry=registry,
        dispatcher=ChargerAlertDispatcher(firebase)
    )
    return ChargerAlertPipeline(services), resolver, detector, registry, firebase


class TestAlertScenario:

    def test_registered_owner_gets_one_alert_and_one_send(self):
        pipeline, registry, firebase = build_pipeline(
            registry=FakeRegistry({"AB12CDE": "U1"}),
            recognizer_results=PLATE_RESULT
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.ALERTED
        assert len(registry.alerts) == 1
        assert registry.audit_count == 1
        alert = registry.alerts[0]
        assert alert.recipient_id == "U1"
        assert alert.plate == "AB12CDE"
        assert alert.recipient_plate == "AB12CDE"
        assert alert.status.value == "sent"
        assert alert.notification_method == "topic"
        assert alert.topic == "charger_alerts"
        assert alert.image_url == "gs://bucket/x.jpg"
        assert alert.public_image_url == "https://storage.googleapis.com/bucket/x.jpg"
        assert alert.confidence == pytest.approx(0.91)

        assert len(firebase.sent) == 1
        assert firebase.sent[0]["data"]["ownerId"] == "U1"
        assert firebase.sent[0]["topic"] == "charger_alerts"

    def test_alert_defaults_for_missing_optional_fields(self):
        pipeline, _, _, registry, _ = fake_pipeline(registry=FakeRegistry({"AB12CDE": "U1"}))

        run(pipeline.run(UsageReport(image_url="https://example.com/x.jpg")))

        alert = registry.alerts[0]
        assert alert.location == "Unknown"
        assert alert.charger_id == "unknown"
        assert alert.reported_by == "anonymous"
        assert alert.public_image_url == "https://example.com/x.jpg"

    def test_intents_in_order(self):
        pipeline, _, _, _, _ = fake_pipeline(registry=FakeRegistry({"AB12CDE": "U1"}))

        result = run(pipeline.run(create_report()))

        assert result.intents == ["topic_send:charger_alerts", "audit:alerts"]

    def test_low_confidence_still_notifies(self):
        detector = FakeDetector(DetectionResult(plate="AB12CDE", confidence=0.2))
        pipeline, _, _, registry, firebase = fake_pipeline(
            detector=detector, registry=FakeRegistry({"AB12CDE": "U1"})
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.ALERTED
        assert len(firebase.sent) == 1
        assert firebase.sent[0]["data"]["confidence"] == "0.2"

    def test_report_id_recorded_on_alert(self):
        pipeline, _, _, registry, _ = fake_pipeline(registry=FakeRegistry({"AB12CDE": "U1"}))

        run(pipeline.run(create_report(report_id="report-1")))

        assert registry.alerts[0].source_event_id == "report-1"


class TestDispatchFailure:

    def test_alert_still_written_when_send_throws(self, rejecting_firebase):
        pipeline, _, _, registry, firebase = fake_pipeline(
            registry=FakeRegistry({"AB12CDE": "U1"}), firebase=rejecting_firebase
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.ALERTED
        assert not result.dispatch.success
        assert len(firebase.sent) == 1
        assert len(registry.alerts) == 1
        assert registry.failed == []
        assert registry.alerts[0].status.value == "sent"
        assert "status 500" in registry.alerts[0].dispatch_error

    def test_unexpected_send_error_does_not_propagate(self):
        pipeline, _, _, registry, _ = fake_pipeline(
            registry=FakeRegistry({"AB12CDE": "U1"}), firebase=FakeFirebase(error=RuntimeError("socket closed"))
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.ALERTED
        assert registry.audit_count == 1


class TestUnregisteredScenario:

    def test_unknown_plate_logged_without_send(self):
        pipeline, registry, firebase = build_pipeline(recognizer_results=PLATE_RESULT)

        result = run(pipeline.run(create_report(location="Car park A", reported_by="R1")))

        assert result.outcome == RunOutcome.UNREGISTERED
        assert registry.audit_count == 1
        record = registry.unregistered[0]
        assert record.plate == "AB12CDE"
        assert record.image_url == "gs://bucket/x.jpg"
        assert record.charger_id == "C1"
        assert record.location == "Car park A"
        assert record.reported_by == "R1"
        assert record.confidence == pytest.approx(0.91)
        assert firebase.sent == []
        assert result.intents == ["audit:unregistered_plates"]

    def test_single_registry_read(self):
        pipeline, _, _, registry, _ = fake_pipeline()

        run(pipeline.run(create_report()))

        assert registry.lookups == ["AB12CDE"]


class TestNoPlateScenario:

    def test_zero_results_writes_nothing(self):
        pipeline, registry, firebase = build_pipeline(recognizer_results=[])

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.NO_PLATE
        assert registry.audit_count == 0
        assert registry.lookups == []
        assert firebase.sent == []


class TestFailureScenarios:

    def test_recognition_timeout(self):
        pipeline, registry, firebase = build_pipeline(recognizer_error=httpx.ReadTimeout("read timed out"))

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert len(registry.failed) == 1
        assert registry.audit_count == 1
        assert "timed out" in registry.failed[0].error
        assert registry.lookups == []
        assert firebase.sent == []

    def test_recognition_error_body_recorded(self):
        body = {"detail": "Invalid upload_url"}
        pipeline, registry, _ = build_pipeline(recognizer_status=400, recognizer_body=body)

        run(pipeline.run(create_report(location="Car park A")))

        record = registry.failed[0]
        assert record.error_details == body
        assert record.image_url == "gs://bucket/x.jpg"
        assert record.charger_id == "C1"
        assert record.location == "Car park A"

    def test_missing_storage_object(self):
        pipeline, registry, _ = build_pipeline(storage_exists=False, recognizer_results=PLATE_RESULT)

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert "File does not exist" in registry.failed[0].error
        assert registry.failed[0].error_details is None

    def test_resolution_error_stops_before_detection(self):
        detector = FakeDetector(DetectionResult(plate="AB12CDE", confidence=0.9))
        pipeline, _, _, registry, _ = fake_pipeline(
            resolver=FakeResolver(error=ResolutionError("File does not exist: x.jpg")),
            detector=detector
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert detector.calls == []
        assert registry.audit_count == 1

    def test_registry_error_is_a_failed_detection(self):
        class BrokenRegistry(FakeRegistry):
            async def find_owner(self, plate):
                raise ConnectionError("database unavailable")

        pipeline, _, _, registry, firebase = fake_pipeline(registry=BrokenRegistry())

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert registry.failed[0].error == "database unavailable"
        assert firebase.sent == []

    def test_structured_error_from_detector(self):
        error = DetectionServiceError("Plate recognition failed with status code 403", status_code=403,
                                      body={"detail": "Invalid token"})
        pipeline, _, _, registry, _ = fake_pipeline(detector=FakeDetector(error=error))

        run(pipeline.run(create_report()))

        assert registry.failed[0].error_details == {"detail": "Invalid token"}

    def test_candidate_without_plate_is_a_failed_detection(self):
        pipeline, registry, firebase = build_pipeline(recognizer_results=[{"plate": "", "score": 0.4}])

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert registry.lookups == []
        assert registry.unregistered == []
        assert len(registry.failed) == 1
        assert registry.failed[0].error_details == {"results": [{"plate": "", "score": 0.4}]}
        assert firebase.sent == []

    def test_out_of_range_score_is_a_failed_detection(self):
        pipeline, registry, firebase = build_pipeline(
            registry=FakeRegistry({"AB12CDE": "U1"}),
            recognizer_results=[{"plate": "ab12cde", "score": 91}]
        )

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.FAILED
        assert registry.alerts == []
        assert len(registry.failed) == 1
        assert firebase.sent == []


class TestInputGuard:

    def test_missing_image_url_skips_without_calls(self):
        pipeline, resolver, detector, registry, firebase = fake_pipeline()

        result = run(pipeline.run(UsageReport(charger_id="C1")))

        assert result.outcome == RunOutcome.SKIPPED
        assert resolver.calls == []
        assert detector.calls == []
        assert registry.audit_count == 0
        assert firebase.sent == []

    def test_missing_credential_skips_without_calls(self):
        detector = FakeDetector(DetectionResult(plate="AB12CDE", confidence=0.9), has_credential=False)
        pipeline, resolver, _, registry, _ = fake_pipeline(detector=detector)

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.SKIPPED
        assert resolver.calls == []
        assert detector.calls == []
        assert registry.audit_count == 0

    def test_missing_payload_skips(self):
        pipeline, resolver, _, registry, _ = fake_pipeline()

        result = run(pipeline.run(None))

        assert result.outcome == RunOutcome.SKIPPED
        assert resolver.calls == []
        assert registry.audit_count == 0

    def test_real_client_without_key_skips(self):
        pipeline, registry, firebase = build_pipeline(api_key="", recognizer_results=PLATE_RESULT)

        result = run(pipeline.run(create_report()))

        assert result.outcome == RunOutcome.SKIPPED
        assert registry.audit_count == 0


class TestRerun:

    def test_duplicate_delivery_writes_second_record(self):
        pipeline, _, _, registry, firebase = fake_pipeline(registry=FakeRegistry({"AB12CDE": "U1"}))
        report = create_report(report_id="report-1")

        run(pipeline.run(report))
        run(pipeline.run(report))

        assert [a.source_event_id for a in registry.alerts] == ["report-1", "report-1"]
        assert len(firebase.sent) == 2
