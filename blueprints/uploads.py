import os
import time
import uuid
from flask import current_app
from werkzeug.utils import secure_filename
from exceptions import ValidationFailed

MEMBER_IMAGE_PREFIX = "/uploads"
EVENT_IMAGE_PREFIX = "/uploads/events"


def save_image(file_storage, field="image", subdir="", prefix=""):
    """
    Store an uploaded image under UPLOAD_FOLDER[/subdir] and return its public URL.
    Size is capped by MAX_CONTENT_LENGTH before the request reaches us.
    """
    if file_storage is None or not file_storage.filename:
        return None

    if not (file_storage.mimetype or "").startswith("image/"):
        raise ValidationFailed([{
            "param": field,
            "msg": "Only image files are allowed",
            "value": file_storage.filename,
            "location": "files",
        }])

    _, ext = os.path.splitext(secure_filename(file_storage.filename))
    filename = f"{prefix}{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}{ext.lower()}"

    folder = os.path.join(current_app.config["UPLOAD_FOLDER"], subdir)
    os.makedirs(folder, exist_ok=True)
    file_storage.save(os.path.join(folder, filename))

    url_prefix = EVENT_IMAGE_PREFIX if subdir == "events" else MEMBER_IMAGE_PREFIX
    return f"{url_prefix}/{filename}"


def save_member_image(file_storage):
    return save_image(file_storage, field="profile_image")


def save_event_image(file_storage):
    return save_image(file_storage, field="image", subdir="events", prefix="event_")


def discard_image(url):
    """Remove a file stored by save_image whose database write did not go through."""
    if not url:
        return
    relative = url[len(MEMBER_IMAGE_PREFIX):].lstrip("/")
    path = os.path.join(current_app.config["UPLOAD_FOLDER"], *relative.split("/"))
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
