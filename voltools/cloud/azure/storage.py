import os

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient, BlobType

from voltools.cloud.errors import UploadFailed

VOLUME_CONTAINER = "quickstart-nanos"
# Page blobs are written in 512-byte pages
PAGE_SIZE = 512


def blob_url(account: str, image_name: str) -> str:
    return f"https://{account}.blob.core.windows.net/{VOLUME_CONTAINER}/{image_name}.vhd"


class AzureBlobUploader:
    """
    Uploads local volume images as page blobs, the format Azure imports managed disks from.
    """

    def __init__(self, storage_account: str, credential=None, blob_service=None):
        self.storage_account = storage_account
        self.credential = credential
        self.blob_service = blob_service

    def _service(self, account: str):
        if self.blob_service is not None:
            return self.blob_service
        return BlobServiceClient(
            account_url=f"https://{account}.blob.core.windows.net",
            credential=self.credential
        )

    def upload(self, cloud_config, local_path: str, image_name: str) -> str:
        account = cloud_config.bucket_name or self.storage_account
        blob_name = f"{image_name}.vhd"
        print(f"📤 Uploading {local_path} to {account}/{VOLUME_CONTAINER}/{blob_name}")
        try:
            image_size = os.path.getsize(local_path)
            if image_size % PAGE_SIZE:
                raise UploadFailed(
                    f"copy volume {image_name} to azure bucket {account}: "
                    f"image size {image_size} is not a multiple of {PAGE_SIZE} bytes"
                )
            container_client = self._service(account).get_container_client(VOLUME_CONTAINER)
            blob_client = container_client.get_blob_client(blob_name)
            with open(local_path, "rb") as f:
                blob_client.upload_blob(f, blob_type=BlobType.PAGEBLOB, overwrite=True)
        except (AzureError, OSError, ValueError) as e:
            raise UploadFailed(f"copy volume {image_name} to azure bucket {account}: {e}") from e
        return blob_url(account, image_name)
