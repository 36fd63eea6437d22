"""Tests for the authenticate, validate, enqueue pipeline."""

import json
from unittest.mock import Mock

import pytest

from helpers import SECRET
from sentinel.common import SignatureVerifier, Unauthorized, sign_payload
from sentinel.models import EnqueuedJob, IgnoredEvent, InvalidPayload
from sentinel.webhook_ingest.pipeline import IncomingRequest, WebhookPipeline
from sentinel.webhook_ingest.producer import JobProducer
from sentinel.webhook_ingest.validator import PayloadValidator


def signed_request(payload, event, secret=SECRET, raw=None):
    body = raw if raw is not None else json.dumps(payload).encode("utf-8")
    return IncomingRequest(
        body=body,
        headers={
            "X-Hub-Signature-256": sign_payload(body, secret),
            "X-GitHub-Event": event,
        },
        source_ip="192.0.2.1",
    )


@pytest.fixture
def producer(queue):
    return JobProducer(queue)


@pytest.fixture
def pipeline(producer):
    return WebhookPipeline(SignatureVerifier(SECRET), PayloadValidator(), producer)


def test_incoming_request_headers_are_case_insensitive():
    request = IncomingRequest(body=b"{}", headers={"X-GitHub-Event": "push"})
    assert request.header("x-github-event") == "push"
    assert request.event_type == "push"
    assert request.header("x-hub-signature-256") is None


def test_push_event_is_enqueued(pipeline, queue, push_payload):
    result = pipeline.process(signed_request(push_payload, "push"))

    assert isinstance(result, EnqueuedJob)
    assert result.job_id == "acme/widgets-a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"
    assert result.priority == 5
    assert queue.get_waiting_count() == 1


def test_pull_request_event_is_enqueued(pipeline, queue, pull_request_payload):
    result = pipeline.process(signed_request(pull_request_payload, "pull_request"))

    assert isinstance(result, EnqueuedJob)
    assert result.data.commit_sha == "c0ffee00c0ffee00c0ffee00c0ffee00c0ffee00"
    assert queue.get_waiting_count() == 1


def test_priority_passed_through(pipeline, push_payload):
    result = pipeline.process(signed_request(push_payload, "push"), priority=2)
    assert result.priority == 2


@pytest.mark.parametrize("headers", [
    {"X-GitHub-Event": "push"},
    {"X-GitHub-Event": "push", "X-Hub-Signature-256": "sha256=" + "0" * 64},
])
def test_unauthenticated_requests_never_enqueue(queue, push_payload, headers):
    producer = Mock(spec=JobProducer)
    pipeline = WebhookPipeline(SignatureVerifier(SECRET), PayloadValidator(), producer)
    request = IncomingRequest(body=json.dumps(push_payload).encode(), headers=headers)

    with pytest.raises(Unauthorized):
        pipeline.process(request)

    producer.enqueue.assert_not_called()


def test_missing_secret_rejects_even_signed_requests(producer, push_payload):
    pipeline = WebhookPipeline(SignatureVerifier(None), PayloadValidator(), producer)
    with pytest.raises(Unauthorized):
        pipeline.process(signed_request(push_payload, "push"))


def test_unsupported_event_is_ignored_without_enqueue(pipeline, queue, push_payload):
    result = pipeline.process(signed_request(push_payload, "deployment"))

    assert isinstance(result, IgnoredEvent)
    assert queue.get_waiting_count() == 0


def test_invalid_push_is_acknowledged_without_enqueue(pipeline, queue, push_payload):
    del push_payload["repository"]

    result = pipeline.process(signed_request(push_payload, "push"))

    assert isinstance(result, InvalidPayload)
    assert result.message == "Invalid push payload"
    assert queue.get_waiting_count() == 0


@pytest.mark.parametrize("raw", [b"not json", b"\xff\xfe", b""])
def test_authentic_non_json_body_reaches_validation(pipeline, queue, raw):
    result = pipeline.process(signed_request(None, "push", raw=raw))

    assert isinstance(result, InvalidPayload)
    assert result.message == "Invalid JSON payload"
    assert queue.get_waiting_count() == 0


def test_authentic_non_json_body_of_unsupported_event_is_ignored(pipeline):
    result = pipeline.process(signed_request(None, "deployment", raw=b"not json"))
    assert isinstance(result, IgnoredEvent)


def test_signature_checked_over_raw_bytes(pipeline, push_payload):
    # Pretty-printed body signed as sent must verify without re-serialization
    raw = json.dumps(push_payload, indent=4).encode("utf-8")
    result = pipeline.process(signed_request(None, "push", raw=raw))
    assert isinstance(result, EnqueuedJob)


def test_push_with_repository_name_string_is_enqueued(pipeline, queue):
    payload = {
        "repository": "acme/widgets",
        "after": "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
        "commits": [],
    }

    result = pipeline.process(signed_request(payload, "push"))

    assert isinstance(result, EnqueuedJob)
    assert result.job_id == "acme/widgets-a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"
    assert result.priority == 5
    assert queue.get_waiting_count() == 1


def test_branch_deletion_push_is_not_enqueued(pipeline, queue, push_payload):
    push_payload.update({"after": "0" * 40, "deleted": True, "commits": []})

    result = pipeline.process(signed_request(push_payload, "push"))

    assert isinstance(result, IgnoredEvent)
    assert result.message == "Branch deletion ignored"
    assert queue.get_waiting_count() == 0


def test_authentic_body_nested_too_deeply_is_invalid_json(pipeline, queue):
    raw = b"[" * 100000 + b"]" * 100000

    result = pipeline.process(signed_request(None, "push", raw=raw))

    assert isinstance(result, InvalidPayload)
    assert result.message == "Invalid JSON payload"
    assert queue.get_waiting_count() == 0
