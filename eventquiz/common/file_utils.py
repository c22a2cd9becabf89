"""Upload helpers for question images."""
import os
import uuid
from flask import current_app

QUIZ_IMAGE_DIR = "quiz-images"


class ImageUploadError(ValueError):
    """Raised when an uploaded image is rejected."""


def get_file_extension(filename: str) -> str:
    """Get file extension from filename."""
    if '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def allowed_file(filename: str) -> bool:
    allowed_exts = {ext.lower() for ext in current_app.config["ALLOWED_IMAGE_EXTENSIONS"]}
    return get_file_extension(filename) in allowed_exts


def generate_unique_filename(original_filename: str) -> str:
    # Stored names never contain user input
    return f"{uuid.uuid4().hex}.{get_file_extension(original_filename)}"


def get_image_url(filename: str) -> str:
    return f"/uploads/{QUIZ_IMAGE_DIR}/{filename}"


def save_question_image(file) -> dict:
    """
    Save an uploaded question image and return its public reference.

    Returns:
        ``{'url', 'file_name', 'file_size'}``

    Raises:
        ImageUploadError: missing file, bad extension or too large
    """
    if not file or not file.filename:
        raise ImageUploadError("No image file provided")

    if not allowed_file(file.filename):
        allowed = ", ".join(sorted(current_app.config["ALLOWED_IMAGE_EXTENSIONS"]))
        raise ImageUploadError(f"Only image files are allowed ({allowed})")

    # Check file size
    file.seek(0, os.SEEK_END)
    file_size = file.tell()
    file.seek(0)  # Reset file pointer

    max_size = current_app.config["MAX_IMAGE_SIZE"]
    if file_size > max_size:
        raise ImageUploadError(f"Image must be at most {max_size // 1024} KB")
    if file_size == 0:
        raise ImageUploadError("Image file is empty")

    image_dir = os.path.join(current_app.config["UPLOAD_DIR"], QUIZ_IMAGE_DIR)
    os.makedirs(image_dir, exist_ok=True)

    unique_filename = generate_unique_filename(file.filename)
    file.save(os.path.join(image_dir, unique_filename))
    current_app.logger.info(f"Saved question image {unique_filename} ({file_size} bytes)")
    return {'url': get_image_url(unique_filename), 'file_name': file.filename, 'file_size': file_size}

