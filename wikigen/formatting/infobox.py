"""Parse `Label: value` key-fact lines into an ordered infobox fact table."""

import re


LEADING_FIELDS = ("Type", "Origin", "Process")

_HEADER_PREFIX = re.compile(r"^#{1,3}\s+")
_BULLET_PREFIX = re.compile(r"^[-*]\s+")
_TRAILING_NUMBER = re.compile(r"\d+$")
_KEY_FACT_LABEL = re.compile(r"Key Fact\s*\d*")


def _clean_key(key: str) -> str:
    key = _HEADER_PREFIX.sub("", key.strip())
    key = _BULLET_PREFIX.sub("", key)
    key = _TRAILING_NUMBER.sub("", key)
    key = _KEY_FACT_LABEL.sub("", key)
    return key.replace("###", "").replace("**", "").strip()


def _clean_value(value: str) -> str:
    value = _HEADER_PREFIX.sub("", value.strip())
    value = _BULLET_PREFIX.sub("", value)
    return value.replace("###", "").replace("*", "").strip()


def parse_key_facts(text: str) -> dict[str, str]:
    """
    Extract key facts from model output.

    Lines without a colon, with placeholder brackets, or with generic
    "Key Fact N" labels are dropped. Type, Origin and Process come first;
    the remaining labels follow alphabetically.
    """
    facts: dict[str, str] = {}

    for line in (text or "").split("\n"):
        line = line.strip()
        if ":" not in line:
            continue

        raw_key, raw_value = line.split(":", 1)
        if not raw_key.strip() or "[" in raw_value or "]" in raw_value:
            continue
        if "key fact" in raw_key.lower():
            continue

        key = _clean_key(raw_key)
        value = _clean_value(raw_value)
        if key and value and "#" not in key:
            facts[key] = value

    ordered = {name: facts.pop(name) for name in LEADING_FIELDS if name in facts}
    for key in sorted(facts):
        ordered[key] = facts[key]
    return ordered
