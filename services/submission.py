'''
----------------------------
Project submission (upload and edit)
Validates everything before touching storage,
and cleans up uploaded objects when a later step fails
----------------------------
'''

import logging
import os
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from db import db
from models import ProjectModel, CollaboratorModel
from models.collaborator import ROLE_OWNER
from services import storage
from services.errors import SubmissionError

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})

DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/zip",
    "text/plain",
})

REQUIRED_FIELDS = ("title", "description", "department")
OPTIONAL_FIELDS = ("level", "video_url", "github_url")


@dataclass(frozen = True)
class UploadPolicy:
    name: str
    bucket_config_key: str
    allowed_types: frozenset
    max_bytes: int
    max_files: int

    @property
    def bucket_name(self):
        return current_app.config.get(self.bucket_config_key)


# Legacy single-image upload
IMAGE_POLICY = UploadPolicy(
    name = "image",
    bucket_config_key = "GCS_IMAGES_BUCKET_NAME",
    allowed_types = IMAGE_TYPES,
    max_bytes = 10 * MB,
    max_files = 1,
)

# Multi-file upload, images and documents
FILES_POLICY = UploadPolicy(
    name = "files",
    bucket_config_key = "GCS_FILES_BUCKET_NAME",
    allowed_types = IMAGE_TYPES | DOCUMENT_TYPES,
    max_bytes = 50 * MB,
    max_files = 10,
)


def file_size(file):
    stream = getattr(file, "stream", file)
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


def validate_fields(data, required = REQUIRED_FIELDS):
    missing = [name for name in required if not (data.get(name) or "").strip()]
    if missing:
        raise SubmissionError(f"Missing required fields: {', '.join(missing)}")


def validate_files(files, policy):
    if len(files) > policy.max_files:
        raise SubmissionError(f"At most {policy.max_files} file(s) allowed for {policy.name}")

    for file in files:
        if not file.filename:
            raise SubmissionError("No file selected")
        if file.mimetype not in policy.allowed_types:
            raise SubmissionError(f"File type not allowed: {file.filename} ({file.mimetype})")
        if file_size(file) > policy.max_bytes:
            raise SubmissionError(
                f"File too large: {file.filename}. Maximum is {policy.max_bytes // MB}MB"
            )


def _upload_all(owner_id, batches):
    # batches: [(policy, [files])], returns [(bucket, path, url)]
    uploaded = []
    try:
        for policy, files in batches:
            for file in files:
                path = storage.build_object_path(owner_id, file.filename)
                file.stream.seek(0)
                url = storage.upload_file(policy.bucket_name, path, file.stream, file.mimetype)
                uploaded.append((policy.bucket_name, path, url))
    except ConnectionError:
        discard_uploads(uploaded)
        raise
    return uploaded


def discard_uploads(uploaded):
    # Compensation for a submission that did not complete
    for bucket_name, path, _url in uploaded:
        storage.delete_file(bucket_name, path)
    if uploaded:
        logger.warning("Discarded %d uploaded object(s) from a failed submission", len(uploaded))


def _clean(data, names):
    cleaned = {}
    for name in names:
        if name not in data:
            continue
        value = data[name]
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[name] = value
    return cleaned


def create_project(owner, data, image = None, files = ()):
    '''
    Validate the form and files, upload the files, then write the project
    and its owner collaborator row in one commit.
    Raises SubmissionError before any upload, ConnectionError or
    SQLAlchemyError after compensating for already uploaded objects.
    '''
    files = list(files)
    validate_fields(data)
    if image is None and not files:
        raise SubmissionError("At least one file is required")
    if image is not None:
        validate_files([image], IMAGE_POLICY)
    validate_files(files, FILES_POLICY)

    batches = []
    if image is not None:
        batches.append((IMAGE_POLICY, [image]))
    batches.append((FILES_POLICY, files))
    uploaded = _upload_all(owner.id, batches)
    urls = [url for _bucket, _path, url in uploaded]

    fields = _clean(data, REQUIRED_FIELDS + OPTIONAL_FIELDS)
    if fields.get("level") is None:
        fields.pop("level", None)

    project = ProjectModel(
        user_id = owner.id,
        creator_name = owner.display_name,
        file_url = urls[0],
        files_urls = urls,
        **fields
    )
    try:
        db.session.add(project)
        db.session.flush()
        db.session.add(CollaboratorModel(project_id = project.id, user_id = owner.id, role = ROLE_OWNER))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Saving project for user %s failed", owner.id)
        discard_uploads(uploaded)
        raise

    logger.info("User %s created project %s with %d file(s)", owner.id, project.id, len(urls))
    return project


def update_project(project, data, image = None, files = ()):
    '''
    Partial update by the owner. A new image replaces the primary asset,
    new files are appended to the asset list.
    '''
    files = list(files)
    present = [name for name in REQUIRED_FIELDS if name in data]
    validate_fields(data, required = present)
    if image is not None:
        validate_files([image], IMAGE_POLICY)
    validate_files(files, FILES_POLICY)

    batches = []
    if image is not None:
        batches.append((IMAGE_POLICY, [image]))
    batches.append((FILES_POLICY, files))
    uploaded = _upload_all(project.user_id, batches)
    urls = [url for _bucket, _path, url in uploaded]

    for name, value in _clean(data, REQUIRED_FIELDS + OPTIONAL_FIELDS).items():
        if name == "level" and value is None:
            continue
        setattr(project, name, value)

    assets = list(project.files_urls or [])
    if image is not None:
        project.file_url = urls[0]
        assets.insert(0, urls[0])
        urls = urls[1:]
    assets.extend(urls)
    if project.file_url and project.file_url not in assets:
        assets.insert(0, project.file_url)
    if project.file_url is None and assets:
        project.file_url = assets[0]
    # Reassign so the JSON column is flagged dirty
    project.files_urls = assets

    try:
        db.session.add(project)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Updating project %s failed", project.id)
        discard_uploads(uploaded)
        raise

    logger.info("Project %s updated, %d new file(s)", project.id, len(uploaded))
    return project
