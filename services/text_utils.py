import re
import unicodedata

from .errors import InvalidQueryError

INVALID_QUERY = 'Please enter a valid name or number of a Pokémon...'

_ID = re.compile(r'[+-]?[0-9]+', re.ASCII)
# PokeAPI slugs: "pikachu", "mr-mime", "porygon-z"
_SLUG = re.compile(r'[a-z0-9]+(?:-[a-z0-9]+)*', re.ASCII)

# Word starts: beginning of string, or right after whitespace / a hyphen
_WORD_START = re.compile(r'(^|[\s\-])([^\s\-])')


def title_case(s: str) -> str:
    """'mr-mime' -> 'Mr-Mime', "farfetch'd" -> "Farfetch'd" (unlike str.title)."""
    if not s:
        return s
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), s.lower())


def unescape_flavor_text(txt: str) -> str:
    if not isinstance(txt, str):
        txt = str(txt or '')
    # PokeAPI flavor text carries form feeds, soft hyphens and hard line breaks
    txt = txt.replace('\u00ad\n', '').replace('\u00ad', '')
    txt = txt.replace('\f', ' ').replace('\n', ' ').replace('\r', ' ')
    return ' '.join(txt.split())


def normalize_query(s: str) -> str:
    return (s or '').strip().lower()


def parse_query(text):
    """Turn raw search box text into an int id or a PokeAPI slug.
    Accents are dropped and inner spaces become hyphens ("Mr Mime" -> "mr-mime").
    """
    if text is None or not str(text).strip():
        raise InvalidQueryError(INVALID_QUERY)
    q = normalize_query(str(text))
    if _ID.fullmatch(q):
        pid = int(q)
        if pid <= 0:
            raise InvalidQueryError(INVALID_QUERY)
        return pid
    q = unicodedata.normalize('NFKD', q)
    q = ''.join(c for c in q if not unicodedata.combining(c))
    # "Farfetch'd" -> farfetchd, "Mr. Mime" -> mr-mime
    q = q.replace("'", '').replace('\u2019', '').replace('.', ' ')
    q = '-'.join(q.split())
    # all-digit here means non-ASCII digits ("²") folded by NFKD
    if not _SLUG.fullmatch(q) or q.isdigit():
        raise InvalidQueryError(INVALID_QUERY)
    return q
