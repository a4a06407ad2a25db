import re
from typing import List, Optional

from .schemas import Environment

_VAR_PATTERN = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")


def interpolate(text: str, environment: Optional[Environment]) -> str:
    """
    Replace ``{{name}}`` tokens with the environment's variable values.

    Unknown variables leave the token verbatim so a misspelt name
    is visible in the outgoing request instead of silently vanishing.
    Without an environment the text is returned as is.
    """
    if environment is None or not text:
        return text
    variables = environment.variables
    return _VAR_PATTERN.sub(lambda m: variables[m.group(1)] if m.group(1) in variables else m.group(0), text)


def tokens(text: str) -> List[str]:
    """Variable names referenced by ``text``, in order of first appearance."""
    seen = []
    for match in _VAR_PATTERN.finditer(text or ""):
        if match.group(1) not in seen:
            seen.append(match.group(1))
    return seen
