"""
Structured error codes for layout degradations and photo failures.
Use these keys in warnings and batch rows; map to user-facing messages in the CLI.
"""

# Degradations: logged and recorded, never fatal
MISSING_DATA = "missing_data"
MEASUREMENT_FAILURE = "measurement_failure"
UNKNOWN_VARIANT = "unknown_variant"
UNRESOLVED_CLASH = "unresolved_clash"

# Photo-level failures
METADATA_FAILED = "metadata_failed"
RENDER_FAILED = "render_failed"
PHOTO_FAILED = "photo_failed"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    MISSING_DATA: "No face regions found; the photo was exported without labels.",
    MEASUREMENT_FAILURE: "Could not measure label text; check the rendering engine and font.",
    UNKNOWN_VARIANT: "Unrecognised label setting; the default was used instead.",
    UNRESOLVED_CLASH: "Some labels still overlap after optimisation.",
    METADATA_FAILED: "Could not read face regions. Check exiftool and the photo file.",
    RENDER_FAILED: "Rendering failed. Check ImageMagick and the output folder.",
    PHOTO_FAILED: "Photo could not be labelled.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)


class FaceLabelError(Exception):
    """Base for photo-level failures; carries an error key."""
    error_key = PHOTO_FAILED


class MeasurementError(FaceLabelError):
    """Rendering engine could not measure text (unreachable or unparsable output)."""
    error_key = MEASUREMENT_FAILURE


class MetadataError(FaceLabelError):
    """Metadata service failed or returned unusable data."""
    error_key = METADATA_FAILED


class RenderError(FaceLabelError):
    """Rendering engine failed to execute a directive sequence."""
    error_key = RENDER_FAILED
