"""User interaction utilities for postinstall."""


def prompt(message: str, default: str = "") -> str:
    """
    Prompt the user for input with an optional default value.

    Args:
        message: The prompt message to display
        default: Default value if user presses Enter

    Returns:
        User input or default value
    """
    if default:
        display = f"{message} [{default}]: "
    else:
        display = f"{message}: "

    try:
        response = input(display).strip()
        return response if response else default
    except EOFError:
        print()
        return default


def ask_yes_no(message: str) -> bool:
    """
    Ask a yes/no question that defaults to no.

    Only 'y' or 'yes' (any case) count as consent. Empty input, EOF and
    anything else are a no; the question is never repeated.
    """
    try:
        response = input(f"{message} [y/N]: ").strip().lower()
    except EOFError:
        print()
        return False

    return response in ("y", "yes")
