"""
Uploads component - image upload and retrieval per room.
"""

from .component import (
    MIME_EXTENSIONS,
    run,
    run_get,
    run_upload,
    stored_filename,
    validate_image,
)
from .models import (
    GetImageInput,
    ImageContentOutput,
    StoredImage,
    UploadImageInput,
    UploadOutput,
    UploadValidationError,
)
from .ports import NamingPolicyPort, RulesPort, StoragePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_get",
    "run_upload",
    # Helpers
    "MIME_EXTENSIONS",
    "stored_filename",
    "validate_image",
    # Models
    "GetImageInput",
    "ImageContentOutput",
    "StoredImage",
    "UploadImageInput",
    "UploadOutput",
    "UploadValidationError",
    # Ports
    "NamingPolicyPort",
    "RulesPort",
    "StoragePort",
    "TimePort",
]
