import os
import re
import time
import uuid
from typing import Optional


def sanitize_filename(name: str) -> str:
    """Remove or replace characters that are unsafe in object keys"""
    return re.sub(r'[<>:"/\\|?*\s]', '_', name)


def get_extension(filename: Optional[str]) -> str:
    """Lower-cased extension including the dot, or '' when there is none"""
    if not filename:
        return ""
    ext = os.path.splitext(sanitize_filename(os.path.basename(filename)))[1].lower()
    return ext if len(ext) > 1 else ""


def generate_object_path(filename: Optional[str], prefix: str = "") -> str:
    """Build a collision resistant object path for an upload.

    Format: {prefix}/{epoch millis}-{random hex}{ext}. Two uploads of the same
    file name, even in the same millisecond, get different paths.
    """
    name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex}{get_extension(filename)}"
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name


def format_file_size(size_bytes: int) -> str:
    """Human-readable size label, always in megabytes with two decimals"""
    return f"{size_bytes / 1024 / 1024:.2f} MB"


def ensure_dir(dir_path: str) -> str:
    """Make sure directory exists, create if not"""
    if not dir_path:
        raise ValueError("Directory path cannot be empty")
    dir_path = os.path.abspath(dir_path)
    os.makedirs(dir_path, exist_ok=True)
    return dir_path
