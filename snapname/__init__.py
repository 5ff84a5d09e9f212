# SnapName - Rename and organize photos from their embedded metadata
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("snapname")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

# ── Centralized project identity ──
PROJECT_NAME = "SnapName"
DATE_CODE = "dt"
DEFAULT_FILE_PATTERN = "$et_$is_$fl_Image"
SOURCE_EXTS = {".arw", ".raw", ".jpg", ".jpeg", ".tif", ".tiff"}
