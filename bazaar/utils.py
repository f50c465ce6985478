import html
from typing import Optional

import bleach


def sanitize_input(value: Optional[str]) -> Optional[str]:
    """Clean a user-supplied free-text field before it is stored.

    - Removes NULL bytes
    - Decodes HTML entities first so escaped markup cannot survive as tags
    - Strips HTML tags using bleach.clean(..., strip=True)
    - Keeps a plain ``&`` as typed instead of bleach's ``&amp;``
    - Trims whitespace

    ``None`` passes through so optional fields stay unset.
    """
    if value is None:
        return None
    val = html.unescape(value.replace("\x00", ""))
    val = bleach.clean(val, tags=set(), strip=True).replace("&amp;", "&")
    return val.strip()
