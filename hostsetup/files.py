"""File management with idempotent operations and templating."""

import grp
import os
import pwd
import shutil
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from jinja2 import Template


def read_file(path: Union[str, Path]) -> str:
    """Read file content, or return an empty string if it does not exist."""
    path = Path(path)
    if not path.exists():
        return ""
    return path.read_text()


def primary_group(username: str) -> str:
    """Get the name of a user's primary group."""
    gid = pwd.getpwnam(username).pw_gid
    return grp.getgrgid(gid).gr_name


def ensure_dir(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Idempotently ensure a directory exists with correct permissions.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        changed = True

    if owner or group or mode:
        if set_permissions(path, owner=owner, group=group, mode=mode):
            changed = True

    return changed


def set_permissions_recursive(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
) -> bool:
    """
    Recursively set ownership on a directory tree.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    if not path.exists():
        return False

    if owner or group:
        chown_arg = f"{owner or ''}:{group or ''}"
        subprocess.run(["chown", "-R", chown_arg, str(path)], check=True)
        return True

    return False


def set_permissions(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Set ownership and permissions on a file or directory.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if owner or group:
        stat = path.stat()
        current_owner = pwd.getpwuid(stat.st_uid).pw_name
        current_group = grp.getgrgid(stat.st_gid).gr_name

        target_owner = owner or current_owner
        target_group = group or current_group

        if current_owner != target_owner or current_group != target_group:
            shutil.chown(path, user=target_owner, group=target_group)
            changed = True

    if mode is not None:
        current_mode = path.stat().st_mode & 0o777
        if current_mode != mode:
            path.chmod(mode)
            changed = True

    return changed


def ensure_file(
    path: Union[str, Path],
    content: str,
    mode: Optional[int] = None,
    backup: bool = True,
) -> bool:
    """
    Idempotently ensure a file exists with specific content.

    The new content is written to a temporary file in the same directory
    and renamed over the target. An existing target keeps its mode and
    ownership unless ``mode`` is given; a new file gets ``mode`` or 0644.

    Args:
        path: Target file path
        content: Desired file content
        mode: File permissions (e.g., 0o644)
        backup: Create timestamped backup if file changes

    Returns:
        True if the file was written
    """
    path = Path(path)
    existing = path.exists()

    if existing and read_file(path) == content:
        return False

    if backup and existing:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = path.parent / f"{path.name}.{timestamp}.bak"
        shutil.copy2(path, backup_path)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as tmp:
            tmp.write(content)
            tmp_path = tmp.name
        if existing:
            stat = path.stat()
            shutil.copymode(path, tmp_path)
            os.chown(tmp_path, stat.st_uid, stat.st_gid)
        if mode is not None or not existing:
            os.chmod(tmp_path, 0o644 if mode is None else mode)
        Path(tmp_path).rename(path)
        tmp_path = None
    finally:
        if tmp_path and Path(tmp_path).exists():
            Path(tmp_path).unlink()

    return True


def copy_file(src: Union[str, Path], dest: Union[str, Path]) -> None:
    """Copy a file's content over ``dest``, creating or truncating it."""
    shutil.copyfile(src, dest)


def append_file(
    src: Union[str, Path],
    dest: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
) -> None:
    """
    Append the bytes of ``src`` to ``dest`` (created if missing).

    Args:
        src: Fragment to append
        dest: File to extend
        owner: Owner to set on ``dest`` afterwards
        group: Group to set on ``dest`` afterwards
    """
    with open(dest, "ab") as f:
        f.write(Path(src).read_bytes())
    if owner or group:
        set_permissions(dest, owner=owner, group=group)


def append_text(dest: Union[str, Path], text: str) -> None:
    """Append text to a file, creating it if missing."""
    with open(dest, "a") as f:
        f.write(text)


def render_template(
    template_path: Union[str, Path],
    context: dict,
) -> str:
    """
    Render a Jinja2 template file.

    Args:
        template_path: Path to template file
        context: Dictionary of variables to substitute

    Returns:
        Rendered template content
    """
    template = Template(Path(template_path).read_text(), keep_trailing_newline=True)
    return template.render(**context)
