import os
import tarfile
import tempfile

from googleapiclient import discovery
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from voltools.cloud.errors import UploadFailed


def archive_name(image_name: str) -> str:
    return f"{image_name}.tar.gz"


class GCSUploader:
    """
    Uploads a raw volume image to Cloud Storage in the tar.gz layout GCP imports images from.
    """

    def __init__(self, credentials=None, storage=None):
        self.storage = storage or discovery.build('storage', 'v1', credentials=credentials)

    def upload(self, cloud_config, local_path: str, image_name: str) -> str:
        bucket = cloud_config.bucket_name
        if not bucket:
            raise UploadFailed(f"copy volume {image_name} to gcp: no bucket configured")

        object_name = archive_name(image_name)
        with tempfile.TemporaryDirectory() as tmp:
            archive_path = os.path.join(tmp, object_name)
            try:
                # GCP expects the raw image to be named disk.raw inside the archive
                with tarfile.open(archive_path, "w:gz") as tar:
                    tar.add(local_path, arcname="disk.raw")
            except OSError as e:
                raise UploadFailed(f"archive volume {image_name}: {e}") from e

            print(f"📤 Uploading {archive_path} to gs://{bucket}/{object_name}")
            media = MediaFileUpload(archive_path, mimetype="application/gzip", resumable=True)
            try:
                request = self.storage.objects().insert(bucket=bucket, name=object_name, media_body=media)
                response = None
                while response is None:
                    _, response = request.next_chunk()
            except (HttpError, OSError) as e:
                raise UploadFailed(f"copy volume {image_name} to gcp bucket {bucket}: {e}") from e

        return f"https://storage.googleapis.com/{bucket}/{object_name}"
