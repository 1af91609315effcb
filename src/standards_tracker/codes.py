"""Standard code grammar.

A standard code is a group letter followed by one or more dot-separated
integers: ``A.1`` is a top-level standard of group A, ``A.1.2`` is the second
child of ``A.1``.  The code doubles as the standard's identity and its path in
the tree, so everything that derives or rewrites codes lives here.
"""

import re

from standards_tracker.errors import MissingRequiredFieldError

CODE_PATTERN = re.compile(r"^[A-Z](\.[0-9]+)+$")
GROUP_CODE_PATTERN = re.compile(r"^[A-Z]$")


def is_valid_code(code) -> bool:
    """Return True if *code* matches ``Letter(.Integer)+``."""
    return isinstance(code, str) and bool(CODE_PATTERN.match(code))


def is_valid_group_code(code) -> bool:
    return isinstance(code, str) and bool(GROUP_CODE_PATTERN.match(code))


def level_of(code) -> int:
    """Return the hierarchy depth of *code*: the number of ``.`` separators.

    ``A.1`` → 1, ``A.1.2`` → 2.  A bare letter (a group code) is level 0.
    """
    if not code or not isinstance(code, str):
        return 0
    return code.count(".")


def group_letter_of(code) -> str:
    """Return the leading group letter of *code*, or '' if there is none."""
    if not code or not isinstance(code, str):
        return ""
    return code[0] if GROUP_CODE_PATTERN.match(code[0]) else ""


def parent_code_of(code: str) -> str | None:
    """Return the code implied as parent by *code*'s path.

    ``A.1.2`` → ``A.1``; a top-level code such as ``A.1`` has no parent.
    """
    if level_of(code) <= 1:
        return None
    return code.rsplit(".", 1)[0]


def has_children(standard) -> bool:
    if standard is None:
        return False
    return bool(standard.children)


def trailing_number(code: str) -> int:
    """Return the integer value of the last segment, or 0 if it is not numeric."""
    last = code.rsplit(".", 1)[-1]
    return int(last) if last.isdigit() else 0


def code_sort_key(code: str) -> tuple:
    """Sort key that orders codes numerically segment by segment (A.9 < A.10)."""
    parts = code.split(".")
    return (parts[0],) + tuple(int(p) if p.isdigit() else 0 for p in parts[1:])


def next_sibling_code(sibling_codes, prefix: str) -> str:
    """Return the next unused code directly under *prefix*.

    Only codes exactly one segment below *prefix* are considered; their trailing
    numbers are compared numerically.
    """
    depth = level_of(prefix) + 1
    numbers = [
        trailing_number(c)
        for c in sibling_codes
        if c and c.startswith(prefix + ".") and level_of(c) == depth
    ]
    return f"{prefix}.{max(numbers, default=0) + 1}"


def generate_new_code(standards, parent_code: str | None = None, group_letter: str | None = None) -> str:
    """Generate the code a new standard would receive at the given position.

    With *parent_code* the siblings are the standards pointing at that parent;
    with *group_letter* they are the top-level standards whose code starts with
    the letter.  Returns '' when neither is supplied.  Pure: calling it twice
    without an intervening insert yields the same code.
    """
    if parent_code:
        siblings = [s.code for s in standards if s.parent_code == parent_code]
        return next_sibling_code(siblings, parent_code)
    if group_letter:
        siblings = [
            s.code for s in standards
            if not s.parent_code and s.code.startswith(group_letter + ".")
        ]
        return next_sibling_code(siblings, group_letter)
    return ""


def replace_prefix(code: str, old_prefix: str, new_prefix: str) -> str:
    """Rewrite *code* when it equals *old_prefix* or lies beneath it.

    Codes that merely share leading characters (``A.10`` for ``A.1``) are left
    unchanged.
    """
    if code == old_prefix:
        return new_prefix
    if code.startswith(old_prefix + "."):
        return new_prefix + code[len(old_prefix):]
    return code


def clean_text(value, field: str, error=MissingRequiredFieldError) -> str:
    """Return *value* stripped, '' for None; anything but a string raises *error*."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise error(f"{field} must be a string, not {type(value).__name__}")
    return value.strip()
