# -*- coding: utf-8 -*-
"""
Storage for uploaded report files.

A report only keeps the opaque key returned by ``save``; bytes live either on
local disk under ``UPLOAD_FOLDER`` or in the ``S3_BUCKET_NAME`` bucket.
"""

import os
import uuid

import boto3
from botocore.exceptions import ClientError
from flask import current_app
from werkzeug.utils import secure_filename


def _new_key(owner_id, filename):
    ext = os.path.splitext(secure_filename(filename or ""))[1].lower()
    return f"{owner_id}/{uuid.uuid4().hex}{ext}"


class LocalFileStore:

    def __init__(self, root):
        self.root = root

    def _path(self, key):
        return os.path.join(self.root, *key.split("/"))

    def save(self, data: bytes, owner_id: int, filename: str) -> str:
        key = _new_key(owner_id, filename)
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return key

    def read(self, key: str) -> bytes:
        try:
            with open(self._path(key), "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"File with key '{key}' not found.")

    def delete(self, key: str):
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            current_app.logger.warning(f"File for key '{key}' already gone")


class S3FileStore:

    def __init__(self, bucket, region=None, client=None):
        self.bucket = bucket
        self.client = client or boto3.client("s3", region_name=region)

    def save(self, data: bytes, owner_id: int, filename: str) -> str:
        key = _new_key(owner_id, filename)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)
            current_app.logger.info(f"S3 Upload successful for key: {key}")
        except ClientError as e:
            raise RuntimeError(f"S3 upload failed: {e.response['Error']['Message']}")
        return key

    def read(self, key: str) -> bytes:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()
        except ClientError as e:
            if e.response['Error']['Code'] == 'NoSuchKey':
                raise FileNotFoundError(f"File with key '{key}' not found in S3.")
            raise RuntimeError(f"S3 download failed: {e.response['Error']['Message']}")

    def delete(self, key: str):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise RuntimeError(f"S3 delete failed: {e.response['Error']['Message']}")


def build_file_store(config):
    backend = config.get("REPORT_STORAGE", "local")
    if backend == "s3":
        return S3FileStore(config["S3_BUCKET_NAME"], region=config.get("AWS_REGION"))
    if backend == "local":
        return LocalFileStore(config["UPLOAD_FOLDER"])
    raise ValueError(f"Unknown REPORT_STORAGE backend: {backend!r}")
