"""Unit tests for the S3 object storage and SMTP mailer adapters."""

import io
import re

import pytest
from starlette.datastructures import Headers, UploadFile

from tourdesk.services import mail_service
from tourdesk.services.mail_service import OTP_SUBJECT, SMTPMailer
from tourdesk.services.storage_service import S3ObjectStorage, build_object_key


class FakeS3Client:
    """Records put_object calls instead of talking to S3."""

    def __init__(self, fail_on_call: int = 0):
        self.calls = []
        self.fail_on_call = fail_on_call

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail_on_call and len(self.calls) == self.fail_on_call:
            raise RuntimeError("access denied")
        return {"ETag": '"etag"'}


def _upload(name: str, body: bytes = b"data", content_type: str = "image/jpeg") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(body),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def test_build_object_key_format():
    key = build_object_key("tour", "old town.jpg")
    assert re.fullmatch(r"tour/\d{13}-\d{1,10}-old town\.jpg", key)


def test_public_url_for_aws_and_custom_endpoint():
    aws = S3ObjectStorage(bucket="images", region="eu-central-1", client=FakeS3Client())
    assert aws.public_url("tour/1-2-a b.jpg") == "https://images.s3.eu-central-1.amazonaws.com/tour/1-2-a%20b.jpg"

    minio = S3ObjectStorage(
        bucket="images", region="us-east-1", endpoint_url="http://localhost:9000/", client=FakeS3Client()
    )
    assert minio.public_url("tour/x.jpg") == "http://localhost:9000/images/tour/x.jpg"


@pytest.mark.asyncio
async def test_upload_puts_public_object_with_field_metadata():
    client = FakeS3Client()
    storage = S3ObjectStorage(bucket="images", region="eu-central-1", client=client)

    url = await storage.upload(_upload("bridge.jpg", b"jpeg-bytes"), "swiperImages")

    call = client.calls[0]
    assert call["Bucket"] == "images"
    assert call["Key"].startswith("tour/") and call["Key"].endswith("-bridge.jpg")
    assert call["Body"] == b"jpeg-bytes"
    assert call["ACL"] == "public-read"
    assert call["ContentType"] == "image/jpeg"
    assert call["Metadata"] == {"fieldName": "swiperImages"}
    assert url == storage.public_url(call["Key"])


@pytest.mark.asyncio
async def test_upload_many_preserves_order_and_stops_on_failure():
    client = FakeS3Client(fail_on_call=2)
    storage = S3ObjectStorage(bucket="images", region="eu-central-1", client=client)

    with pytest.raises(RuntimeError):
        await storage.upload_many([_upload("a.jpg"), _upload("b.jpg"), _upload("c.jpg")], "swiperImages")

    # The first object stays in the bucket, the third is never attempted
    assert len(client.calls) == 2
    assert client.calls[0]["Key"].endswith("-a.jpg")


@pytest.mark.asyncio
async def test_upload_many_returns_urls_in_order():
    storage = S3ObjectStorage(bucket="images", region="eu-central-1", client=FakeS3Client())

    urls = await storage.upload_many([_upload("a.jpg"), _upload("b.jpg")], "teamMemberPhoto")

    assert [url.rsplit("-", 1)[-1] for url in urls] == ["a.jpg", "b.jpg"]


def test_otp_message_contents():
    mailer = SMTPMailer(hostname="smtp.test", port=587, username="tours@example.com", password="pw")

    msg = mailer.build_otp_message("guest@example.com", "123456")

    assert msg["Subject"] == OTP_SUBJECT
    assert msg["From"] == "tours@example.com"
    assert msg["To"] == "guest@example.com"
    assert "Your OTP is 123456." in msg.get_content()


@pytest.mark.asyncio
async def test_send_otp_uses_starttls_login(monkeypatch):
    sent = {}

    async def fake_send(message, **kwargs):
        sent["message"] = message
        sent.update(kwargs)

    monkeypatch.setattr(mail_service.aiosmtplib, "send", fake_send)
    mailer = SMTPMailer(hostname="smtp.test", port=587, username="tours@example.com", password="pw")

    await mailer.send_otp("guest@example.com", "654321")

    assert sent["hostname"] == "smtp.test"
    assert sent["port"] == 587
    assert sent["start_tls"] is True
    assert sent["username"] == "tours@example.com"
    assert sent["password"] == "pw"
    assert sent["message"]["To"] == "guest@example.com"
