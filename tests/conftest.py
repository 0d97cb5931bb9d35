"""
Fixtures shared by the test-suite.

Store tests run once per backend through the parametrized ``store`` fixture;
the S3 backend talks to an in-memory client with the boto3 call shapes the
code uses.
"""
import io

import pytest
from botocore.exceptions import ClientError

from annotator_app.domains.annotation.repositories.local_document_store import LocalDocumentStore
from annotator_app.domains.annotation.repositories.s3_document_store import S3DocumentStore
from annotator_app.infrastructure.assets.asset_store import LocalAssetStore, S3AssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.infrastructure.persistence.s3_documents import S3DocumentSet

BUCKET = "test-bucket"
REGION = "us-east-1"


class InMemoryS3Client:
    """Dict-backed stand-in for a boto3 S3 client"""

    def __init__(self):
        self.objects = {}
        self.fail_deletes = False
        self.fail_puts = False

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject"
            )
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)]["Body"])}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        if self.fail_puts:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject")
        self.objects[(Bucket, Key)] = {"Body": bytes(Body), "ContentType": ContentType}
        return {}

    def delete_object(self, Bucket, Key):
        if self.fail_deletes:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject")
        self.objects.pop((Bucket, Key), None)
        return {}

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600):
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def body(self, key, bucket=BUCKET):
        return self.objects[(bucket, key)]["Body"]


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def s3_client():
    return InMemoryS3Client()


@pytest.fixture
def local_store(tmp_path, metrics):
    asset_store = LocalAssetStore(tmp_path / "assets")
    return LocalDocumentStore(tmp_path / "data" / "annotator.json", asset_store=asset_store, metrics=metrics)


@pytest.fixture
def s3_store(s3_client, metrics):
    asset_store = S3AssetStore(s3_client, BUCKET, region=REGION)
    return S3DocumentStore(S3DocumentSet(s3_client, BUCKET), asset_store=asset_store, metrics=metrics)


@pytest.fixture(params=["local", "s3"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
async def checkout(store):
    """Module "Checkout" with screenshots A, B, C in that order"""
    module = await store.create_module("Checkout")
    for name in ("A", "B", "C"):
        await store.create_screenshot(module.key, {"name": name, "url": f"/assets/screenshots/checkout/{name}.png"})
    return await store.get_module(module.key)
