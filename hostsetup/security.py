"""SSH daemon hardening: key-based authentication only."""

import re
from pathlib import Path
from typing import Dict, List, Tuple, Union

from .files import ensure_file, read_file

# Directive -> enforced value, in the order they are applied
KEY_ONLY_DIRECTIVES: Dict[str, str] = {
    "PasswordAuthentication": "no",
    "ChallengeResponseAuthentication": "no",
    "PubkeyAuthentication": "yes",
}


def apply_sshd_directives(
    lines: List[str],
    directives: Dict[str, str],
    append_missing: bool = False,
) -> Tuple[List[str], List[str]]:
    """
    Set sshd_config directives in a list of lines.

    For each directive, the first line starting with the directive name,
    commented or not, becomes ``<Directive> <value>``. Later uncommented
    lines for the same directive are commented out, leaving one active
    line. Matching is case-sensitive and anchored at the line start.

    Args:
        lines: Config lines without line terminators
        directives: Mapping of directive name to value
        append_missing: Append directives that have no line at all

    Returns:
        (new lines, names of directives with no matching line)
    """
    result = list(lines)
    missing = []

    for name, value in directives.items():
        any_form = re.compile(rf"^#?{re.escape(name)}")
        active_form = re.compile(rf"^{re.escape(name)}")
        canonical = f"{name} {value}"

        first = next((i for i, line in enumerate(result) if any_form.match(line)), None)
        if first is None:
            missing.append(name)
            if append_missing:
                result.append(canonical)
            continue

        result[first] = canonical
        for i in range(first + 1, len(result)):
            if active_form.match(result[i]):
                result[i] = "#" + result[i]

    return result, missing


def harden_sshd_config(
    config_path: Union[str, Path],
    directives: Dict[str, str] = KEY_ONLY_DIRECTIVES,
    append_missing: bool = False,
) -> Tuple[bool, List[str]]:
    """
    Rewrite sshd_config in place so only key-based logins are accepted.

    The file is replaced atomically and the previous version kept as a
    timestamped backup when it changes.

    Returns:
        (whether the file changed, directives not present in the file)
    """
    config_path = Path(config_path)
    content = read_file(config_path)

    lines, missing = apply_sshd_directives(
        content.splitlines(), directives, append_missing=append_missing
    )
    new_content = "\n".join(lines) + "\n" if lines else ""

    changed = ensure_file(config_path, new_content, backup=True)
    return changed, missing
