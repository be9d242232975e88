import re

from ci_trigger.models import SourceControlUser

AUTHOR_PATTERN = re.compile(r"^(.*?)\s*<([^>]*)>\s*$")


def parse_media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def parse_author(raw: str) -> SourceControlUser:
    """Split a ``Name <email>`` string as sent by Bitbucket and git.

    A string without an address is taken as the name.
    """
    m = AUTHOR_PATTERN.match(raw.strip())
    if m is None:
        return SourceControlUser(name=raw.strip())
    return SourceControlUser(name=m.group(1), email=m.group(2).strip())
