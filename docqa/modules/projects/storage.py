"""Supabase Storage gateway. Each project owns a bucket named after the project."""
from supabase import Client
from docqa.config import settings
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class StorageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def download_with_retry(self, bucket: str, path: str, max_attempts: Optional[int] = None) -> Optional[bytes]:
        """Download a file, retrying immediately on failure. Returns None once every attempt failed."""
        if max_attempts is None:
            max_attempts = settings.download_max_attempts
        attempts = 0
        while attempts < max_attempts:
            try:
                return self.supabase.storage.from_(bucket).download(path)
            except Exception as e:
                attempts += 1
                logger.error(f"Error downloading {bucket}/{path} (attempt {attempts}/{max_attempts}): {str(e)}")
        logger.error(f"Could not download {bucket}/{path} after {max_attempts} attempts")
        return None

    def bucket_exists(self, name: str) -> bool:
        buckets = self.supabase.storage.list_buckets()
        return any(bucket.id == name for bucket in buckets)

    def ensure_bucket(self, name: str, public: bool = True) -> bool:
        """Create the bucket if it is missing. Returns True when a bucket was created."""
        if self.bucket_exists(name):
            return False
        self.supabase.storage.create_bucket(name, options={"public": public})
        logger.info(f"Created storage bucket {name}")
        return True

    def upload(
        self, bucket: str, path: str, content: bytes,
        content_type: str = "application/pdf", upsert: bool = False
    ) -> str:
        """Upload file content and return its path inside the bucket. upsert overwrites an existing object."""
        self.supabase.storage.from_(bucket).upload(
            path,
            content,
            file_options={"content-type": content_type, "upsert": "true" if upsert else "false"}
        )
        return path

    def create_signed_url(self, bucket: str, path: str, expires_in: Optional[int] = None) -> str:
        response = self.supabase.storage.from_(bucket).create_signed_url(
            path, expires_in or settings.signed_url_expires_in
        )
        return response.get("signedUrl") or response.get("signedURL") or ""

    def remove(self, bucket: str, paths: List[str]) -> bool:
        """Delete files from a bucket"""
        try:
            self.supabase.storage.from_(bucket).remove(paths)
            return True
        except Exception as e:
            logger.warning(f"Failed to delete {paths} from bucket {bucket}: {e}")
            return False

    def delete_bucket(self, name: str) -> bool:
        """Empty and delete a project bucket"""
        try:
            self.supabase.storage.empty_bucket(name)
            self.supabase.storage.delete_bucket(name)
            return True
        except Exception as e:
            logger.warning(f"Failed to delete bucket {name}: {e}")
            return False
