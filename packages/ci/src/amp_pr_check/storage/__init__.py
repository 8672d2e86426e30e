from .archive import extract, pack, verify_entries
from .credentials import activate_credential, authenticate, decrypt_key_file
from .outputs import (
    download_build_output,
    download_dist_output,
    process_and_upload_dist_output,
    upload_build_output,
    upload_dist_output,
)
from .transfer import TransferContext, download, upload
from .types import (
    BUILD_OUTPUT_DIRS,
    DIST_OUTPUT_DIRS,
    ArtifactKind,
    ArtifactSpec,
    Credential,
    StorageTarget,
    archive_name,
    output_dirs,
)

__all__ = [
    "ArtifactKind",
    "ArtifactSpec",
    "StorageTarget",
    "Credential",
    "BUILD_OUTPUT_DIRS",
    "DIST_OUTPUT_DIRS",
    "archive_name",
    "output_dirs",
    "pack",
    "extract",
    "verify_entries",
    "decrypt_key_file",
    "activate_credential",
    "authenticate",
    "TransferContext",
    "upload",
    "download",
    "download_build_output",
    "download_dist_output",
    "upload_build_output",
    "upload_dist_output",
    "process_and_upload_dist_output",
]
