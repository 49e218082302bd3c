"""
Repairs applied to model output before it is committed as the page
component. Each rule is a pure text transformation and is safe to run
more than once.
"""
import re
from pagefactory.core.logging import get_logger

logger = get_logger("sanitizer")

COMPONENT_NAME = "LandingPage"
REQUIRED_EXPORT = f"export default {COMPONENT_NAME};"
REQUIRED_HEADER = '"use client";\nimport { motion } from "framer-motion";\nimport React from "react";\n\n'

EASE_OUT = "[0.25, 0.1, 0.25, 1]"
EASE_IN = "[0.42, 0, 1, 1]"
EASE_IN_OUT = "[0.42, 0, 0.58, 1]"
LINEAR = "'linear'"

EASING_CURVES = {
    "easeOut": EASE_OUT,
    EASE_OUT: EASE_OUT,
    "easeIn": EASE_IN,
    EASE_IN: EASE_IN,
    "easeInOut": EASE_IN_OUT,
    EASE_IN_OUT: EASE_IN_OUT,
    "linear": LINEAR,
}

_FENCE = re.compile(r"^[ \t]*```[\w-]*[ \t]*$\n?", re.MULTILINE)
_EASE = re.compile(r"""ease:\s*(["'])(.*?)\1""")
_EXPORT = re.compile(rf"^[ \t]*export\s+default\s+{COMPONENT_NAME}\b[ \t]*;?[ \t]*$", re.MULTILINE)

# react / framer-motion imports, including ones wrapped over several lines
_FRAMEWORK_IMPORT = re.compile(
    r"""^[ \t]*import\s+[^;'"]*?\s+from\s+["'](?:react|framer-motion)["'][ \t]*;?[ \t]*$\n?""",
    re.MULTILINE,
)
# Lines the pipeline owns: the client directive and bare framework imports
_HEADER_LINES = [
    re.compile(r"""^\s*["']?use client["']?;?\s*$"""),
    re.compile(r"""^\s*import\s+["'](?:react|framer-motion)["'];?\s*$"""),
]
_LEADING_NOISE = [
    re.compile(r"^\s*//.*$"),
    re.compile(r"^\s*typescript\s*$", re.IGNORECASE),
    re.compile(r"^\s*$"),
]


def strip_code_fences(code: str) -> str:
    return _FENCE.sub("", code).strip()


def strip_framework_header(code: str) -> str:
    """Drop echoed directives/imports anywhere, and comments or a language tag before the code starts."""
    code = _FRAMEWORK_IMPORT.sub("", code)
    lines = [
        line for line in code.splitlines()
        if not any(p.match(line) for p in _HEADER_LINES)
    ]
    while lines and any(p.match(lines[0]) for p in _LEADING_NOISE):
        lines.pop(0)
    return "\n".join(lines).strip()


def inject_header(code: str) -> str:
    return REQUIRED_HEADER + strip_framework_header(code)


def _replace_ease(match: re.Match) -> str:
    value = match.group(2).strip()
    curve = EASING_CURVES.get(value)
    if curve is None:
        logger.warning(f"Unrecognized ease value '{value}', defaulting to ease-out curve")
        curve = EASE_OUT
    return f"ease: {curve}"


def normalize_easing(code: str) -> str:
    """Turn quoted easing names into the literals framer-motion accepts."""
    return _EASE.sub(_replace_ease, code)


def ensure_default_export(code: str) -> str:
    if REQUIRED_EXPORT in code:
        return code
    if _EXPORT.search(code):
        logger.warning(f"Generated code has a malformed default export, rewriting it as '{REQUIRED_EXPORT}'")
        return _EXPORT.sub(REQUIRED_EXPORT, code, count=1)
    logger.warning(f"Generated code omits '{REQUIRED_EXPORT}', appending it")
    return code + f"\n\n{REQUIRED_EXPORT}"


def sanitize_component(raw: str) -> str:
    code = strip_code_fences(raw)
    code = strip_framework_header(code)
    code = normalize_easing(code)
    code = ensure_default_export(code)
    return inject_header(code)
