from shlex import quote

from .executor import PreparedRequest


def to_curl(prepared: PreparedRequest) -> str:
    parts = [f"curl -X {prepared.method} {quote(prepared.url)}"]

    for k, v in prepared.headers.items():
        parts.append(f"-H {quote(f'{k}: {v}')}")

    if prepared.body is not None:
        parts.append(f"--data-raw {quote(prepared.body)}")

    return " \\\n  ".join(parts)
