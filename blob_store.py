import os
import uuid
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from errors import InvalidInputError, StorageError

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
MAX_IMAGE_DIMENSION = 1024


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


class LocalBlobStore:
    """
    Stores uploaded proof images on local disk.
    The returned image URL is opaque to the rest of the system; it is only
    ever handed back to the labeler and to clients.
    """

    def __init__(self, folder, url_prefix='/uploads'):
        self.folder = folder
        self.url_prefix = url_prefix.rstrip('/')

    def path_for(self, name):
        return os.path.join(self.folder, secure_filename(name))

    def save(self, data: bytes, filename: str) -> str:
        if not data:
            raise InvalidInputError("Image is required")
        if not filename or not allowed_file(filename):
            raise InvalidInputError("Invalid file type. Please upload a valid image.")

        # Reject anything Pillow cannot parse before it touches the disk
        try:
            with Image.open(BytesIO(data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise InvalidInputError("Uploaded file is not a valid image") from e

        name = secure_filename(f"{uuid.uuid4().hex}_{filename}")
        filepath = self.path_for(name)
        try:
            os.makedirs(self.folder, exist_ok=True)
            with open(filepath, 'wb') as fh:
                fh.write(data)
        except OSError as e:
            logging.error(f"Failed to write upload {filepath}: {e}", exc_info=True)
            raise StorageError("Failed to store uploaded image") from e

        self._shrink(filepath)
        logging.info(f"Stored upload {name} ({len(data)} bytes)")
        return f"{self.url_prefix}/{name}"

    def _shrink(self, filepath):
        try:
            with Image.open(filepath) as img:
                if img.width > MAX_IMAGE_DIMENSION or img.height > MAX_IMAGE_DIMENSION:
                    img.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION), Image.Resampling.LANCZOS)
                    img.save(filepath, optimize=True, quality=85)
        except OSError as e:
            # The stored upload is still usable unresized
            logging.error(f"Error resizing image {filepath}: {e}")

    def delete(self, image_url: str):
        name = image_url.rsplit('/', 1)[-1]
        filepath = self.path_for(name)
        try:
            os.remove(filepath)
        except FileNotFoundError:
            pass
        except OSError as e:
            logging.warning(f"Could not delete upload {filepath}: {e}")
