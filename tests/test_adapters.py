"""Provider adapters exercised with fake boto3/pika clients."""

from __future__ import annotations

import io
import json
from uuid import uuid4

import httpx
import pytest
from botocore.exceptions import ClientError

from app.config.settings import QueueConfig, S3Config, TranscribeConfig, settings
from app.domain.models import AssetJob
from app.infrastructure.external.mq_adapter import RabbitMQJobQueue
from app.infrastructure.external.s3_adapter import S3AssetStore, StorageError
from app.services.llm_client import BedrockLlmClient, LlmInvocationError, image_format_for
from app.services.transcribe import (
    JOB_COMPLETED,
    JOB_ERROR,
    JOB_PROCESSING,
    TranscribeService,
    TranscriptionError,
    parse_transcript_document,
)


def _client_error(code: str, status: int = 400, operation: str = "Converse") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


def _converse_response(text: str) -> dict:
    return {"output": {"message": {"content": [{"text": text}]}}}


class FakeBedrockClient:
    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[dict] = []

    def converse(self, **request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _bedrock_config(**overrides):
    values = {"max_attempts": 4, "base_delay_seconds": 2.0, "max_delay_seconds": 30.0}
    values.update(overrides)
    return settings.bedrock.model_copy(update=values)


# --- Bedrock ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_complete_returns_text():
    client = FakeBedrockClient(_converse_response("  hello  "))
    llm = BedrockLlmClient(_bedrock_config(), client=client, sleep=RecordingSleep())

    assert await llm.complete("Say hello", system_prompt="Be brief") == "hello"
    request = client.requests[0]
    assert request["messages"][0]["content"] == [{"text": "Say hello"}]
    assert request["system"] == [{"text": "Be brief"}]


@pytest.mark.asyncio
async def test_throttling_is_retried_with_exponential_backoff():
    client = FakeBedrockClient(
        _client_error("ThrottlingException"),
        _client_error("TooManyRequests", status=429),
        _converse_response("ok"),
    )
    sleep = RecordingSleep()
    llm = BedrockLlmClient(_bedrock_config(), client=client, sleep=sleep)

    assert await llm.complete("prompt") == "ok"
    assert sleep.calls == [2.0, 4.0]


@pytest.mark.asyncio
async def test_backoff_is_capped_and_attempts_are_bounded():
    client = FakeBedrockClient(*[_client_error("ThrottlingException") for _ in range(4)])
    sleep = RecordingSleep()
    llm = BedrockLlmClient(_bedrock_config(max_delay_seconds=3.0), client=client, sleep=sleep)

    with pytest.raises(LlmInvocationError):
        await llm.complete("prompt")
    assert len(client.requests) == 4
    assert sleep.calls == [2.0, 3.0, 3.0]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried():
    client = FakeBedrockClient(_client_error("ValidationException"))
    sleep = RecordingSleep()
    llm = BedrockLlmClient(_bedrock_config(), client=client, sleep=sleep)

    with pytest.raises(LlmInvocationError):
        await llm.complete("prompt")
    assert len(client.requests) == 1
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_empty_response_is_an_error():
    llm = BedrockLlmClient(_bedrock_config(), client=FakeBedrockClient(_converse_response("")))

    with pytest.raises(LlmInvocationError):
        await llm.complete("prompt")


@pytest.mark.asyncio
async def test_describe_image_sends_image_block():
    client = FakeBedrockClient(_converse_response("Description: a can"))
    config = _bedrock_config(vision_model_id="vision-model")
    llm = BedrockLlmClient(config, client=client)

    await llm.describe_image(b"bytes", "image/jpeg", prompt="Describe")

    request = client.requests[0]
    assert request["modelId"] == "vision-model"
    image_block, text_block = request["messages"][0]["content"]
    assert image_block == {"image": {"format": "jpeg", "source": {"bytes": b"bytes"}}}
    assert text_block == {"text": "Describe"}


def test_unsupported_image_type():
    assert image_format_for("IMAGE/PNG") == "png"
    with pytest.raises(LlmInvocationError):
        image_format_for("image/tiff")


# --- Transcribe ------------------------------------------------------------

TRANSCRIPT_DOCUMENT = {
    "results": {
        "language_code": "en-US",
        "transcripts": [{"transcript": "Fizzy Cola, always."}],
        "items": [
            {
                "type": "pronunciation",
                "start_time": "0.04",
                "end_time": "0.51",
                "alternatives": [{"content": "Fizzy", "confidence": "0.99"}],
            },
            {
                "type": "pronunciation",
                "start_time": "0.51",
                "end_time": "0.93",
                "alternatives": [{"content": "Cola", "confidence": "0.87"}],
            },
            {"type": "punctuation", "alternatives": [{"content": ","}]},
            {
                "type": "pronunciation",
                "start_time": "1.10",
                "end_time": "1.62",
                "alternatives": [{"content": "always", "confidence": "0.95"}],
            },
        ],
    }
}


class FakeTranscribeClient:
    def __init__(self, job: dict | None = None, error: Exception | None = None) -> None:
        self.job = job or {}
        self.error = error
        self.started: list[dict] = []

    def start_transcription_job(self, **request):
        if self.error is not None:
            raise self.error
        self.started.append(request)
        return {"TranscriptionJob": {"TranscriptionJobStatus": "IN_PROGRESS"}}

    def get_transcription_job(self, TranscriptionJobName):
        if self.error is not None:
            raise self.error
        return {"TranscriptionJob": dict(self.job, TranscriptionJobName=TranscriptionJobName)}


def _http_client(status_code: int = 200, payload: dict | None = None) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload if payload is not None else {})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_parse_transcript_document():
    status = parse_transcript_document(TRANSCRIPT_DOCUMENT)

    assert status.state == JOB_COMPLETED
    assert status.text == "Fizzy Cola, always."
    assert [word.text for word in status.words] == ["Fizzy", "Cola", "always"]
    assert status.words[0].start_ms == 40
    assert status.words[1].confidence == pytest.approx(0.87)
    assert status.duration_ms == 1620
    assert status.language_code == "en-US"


@pytest.mark.asyncio
async def test_submit_uses_language_code_when_configured():
    client = FakeTranscribeClient()
    service = TranscribeService(TranscribeConfig(language_code="en-US"), client=client)

    job_name = await service.submit("https://cdn.example.com/clip.mp4")

    assert job_name.startswith("compliance-")
    request = client.started[0]
    assert request["Media"] == {"MediaFileUri": "https://cdn.example.com/clip.mp4"}
    assert request["LanguageCode"] == "en-US"
    assert "IdentifyLanguage" not in request


@pytest.mark.asyncio
async def test_submit_wraps_client_errors():
    client = FakeTranscribeClient(error=_client_error("BadRequestException", operation="StartTranscriptionJob"))
    service = TranscribeService(TranscribeConfig(), client=client)

    with pytest.raises(TranscriptionError):
        await service.submit("https://cdn.example.com/clip.mp4")


@pytest.mark.asyncio
async def test_status_in_progress():
    client = FakeTranscribeClient({"TranscriptionJobStatus": "IN_PROGRESS"})
    service = TranscribeService(TranscribeConfig(), client=client)

    assert (await service.status("job-1")).state == JOB_PROCESSING


@pytest.mark.asyncio
async def test_status_failed_carries_reason():
    client = FakeTranscribeClient({"TranscriptionJobStatus": "FAILED", "FailureReason": "Unsupported media"})
    service = TranscribeService(TranscribeConfig(), client=client)

    status = await service.status("job-1")

    assert status.state == JOB_ERROR
    assert status.error == "Unsupported media"


@pytest.mark.asyncio
async def test_status_completed_fetches_transcript():
    client = FakeTranscribeClient(
        {
            "TranscriptionJobStatus": "COMPLETED",
            "Transcript": {"TranscriptFileUri": "https://transcripts.example.com/job-1.json"},
        }
    )
    async with _http_client(payload=TRANSCRIPT_DOCUMENT) as http_client:
        service = TranscribeService(TranscribeConfig(), client=client, http_client=http_client)
        status = await service.status("job-1")

    assert status.state == JOB_COMPLETED
    assert status.text == "Fizzy Cola, always."


@pytest.mark.asyncio
async def test_transcript_download_failure():
    client = FakeTranscribeClient(
        {
            "TranscriptionJobStatus": "COMPLETED",
            "Transcript": {"TranscriptFileUri": "https://transcripts.example.com/missing.json"},
        }
    )
    async with _http_client(status_code=404) as http_client:
        service = TranscribeService(TranscribeConfig(), client=client, http_client=http_client)
        with pytest.raises(TranscriptionError):
            await service.status("job-1")


# --- S3 --------------------------------------------------------------------


class FakeS3Client:
    def __init__(self, payload: bytes = b"", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.requests: list[dict] = []

    def get_object(self, **request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return {"Body": io.BytesIO(self.payload)}


@pytest.mark.asyncio
async def test_download_reads_object_body():
    client = FakeS3Client(b"creative-bytes")
    store = S3AssetStore(S3Config(bucket_name="assets"), client=client)

    assert await store.download("/campaigns/1/ad.png") == b"creative-bytes"
    assert client.requests == [{"Bucket": "assets", "Key": "campaigns/1/ad.png"}]


@pytest.mark.asyncio
async def test_download_wraps_client_errors():
    store = S3AssetStore(
        S3Config(bucket_name="assets"),
        client=FakeS3Client(error=_client_error("NoSuchKey", 404, "GetObject")),
    )

    with pytest.raises(StorageError):
        await store.download("campaigns/1/ad.png")


def test_public_url_variants():
    client = FakeS3Client()

    assert (
        S3AssetStore(S3Config(bucket_name="assets", region="us-east-1"), client=client).public_url("a b.mp4")
        == "https://assets.s3.amazonaws.com/a%20b.mp4"
    )
    assert (
        S3AssetStore(S3Config(bucket_name="assets", region="eu-west-1"), client=client).public_url("x.mp4")
        == "https://assets.s3.eu-west-1.amazonaws.com/x.mp4"
    )
    assert (
        S3AssetStore(
            S3Config(bucket_name="assets", public_base_url="https://cdn.example.com/"), client=client
        ).public_url("/x.mp4")
        == "https://cdn.example.com/x.mp4"
    )


# --- RabbitMQ --------------------------------------------------------------


class FakeMethod:
    delivery_tag = 1


class FakeChannel:
    def __init__(self, broker: "FakeBroker") -> None:
        self.broker = broker

    def queue_declare(self, queue, durable):
        self.broker.declared.append((queue, durable))

    def basic_publish(self, exchange, routing_key, body, properties):
        self.broker.messages.append(body)
        self.broker.properties.append(properties)

    def basic_get(self, queue, auto_ack):
        if not self.broker.messages:
            return None, None, None
        return FakeMethod(), None, self.broker.messages.pop(0)


class FakeConnection:
    def __init__(self, broker: "FakeBroker") -> None:
        self.broker = broker

    def channel(self):
        return FakeChannel(self.broker)

    def close(self):
        self.broker.closed += 1


class FakeBroker:
    def __init__(self) -> None:
        self.messages: list = []
        self.properties: list = []
        self.declared: list = []
        self.closed = 0

    def __call__(self, params):
        return FakeConnection(self)


def _queue_config() -> QueueConfig:
    return QueueConfig(backend="rabbitmq", queue_name="jobs", poll_interval_seconds=0.01)


@pytest.mark.asyncio
async def test_rabbitmq_publish_and_get():
    broker = FakeBroker()
    queue = RabbitMQJobQueue(_queue_config(), connection_factory=broker)
    job = AssetJob(asset_id=uuid4(), storage_path="campaigns/1/ad.mp4", campaign_id=uuid4())

    await queue.publish(job)
    received = await queue.get()

    assert received == job
    assert broker.properties[0].delivery_mode == 2
    assert broker.declared[0] == ("jobs", True)
    assert broker.closed == 2


@pytest.mark.asyncio
async def test_rabbitmq_get_skips_malformed_messages():
    broker = FakeBroker()
    job = AssetJob(asset_id=uuid4(), storage_path="p", campaign_id=uuid4())
    broker.messages.extend([b"not json", json.dumps({"asset_id": "nope"}), job.model_dump_json()])
    queue = RabbitMQJobQueue(_queue_config(), connection_factory=broker)

    assert await queue.get() == job
