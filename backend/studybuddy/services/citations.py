# studybuddy/services/citations.py
"""Citation strings for Google Scholar results.

Scholar's ``publication_info.summary`` usually reads
``"A Author, B Author - Journal, 2020 - publisher.com"``; the helpers below
pull authors, source and year out of it.
"""
import re
from typing import Any, Dict, Tuple

UNKNOWN_AUTHOR = "Unknown Author"
MAX_APA_AUTHORS = 3

_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
_SOURCE_YEAR = re.compile(r",?\s*\d{4}")


def _summary_parts(result: Dict[str, Any]):
    info = (result.get("publication_info") or {}).get("summary") or ""
    return info.split(" - ")


def _source_and_year(parts) -> Tuple[str, str]:
    if len(parts) < 2:
        return "", ""
    m = _YEAR.search(parts[1])
    year = m.group(0) if m else ""
    source = _SOURCE_YEAR.sub("", parts[1], count=1).strip()
    return source, year


def _apa_name(name: str) -> str:
    bits = name.split()
    if len(bits) < 2:
        return name.strip()
    initials = " ".join(b[0] + "." for b in bits[:-1])
    return f"{bits[-1]}, {initials}"


def apa_citation(result: Dict[str, Any]) -> str:
    parts = _summary_parts(result)
    authors = UNKNOWN_AUTHOR
    if parts[0].strip():
        all_names = parts[0].split(", ")
        names = all_names[:MAX_APA_AUTHORS]
        authors = ", ".join(_apa_name(n) for n in names)
        if len(names) < len(all_names):
            authors += ", et al."

    source, year = _source_and_year(parts)
    year = year or "n.d."
    source_part = f"*{source}*. " if source else ""
    return f"{authors} ({year}). {result.get('title', '')}. {source_part}{result.get('link', '')}"


def mla_citation(result: Dict[str, Any]) -> str:
    parts = _summary_parts(result)
    authors = parts[0].strip() or UNKNOWN_AUTHOR
    source, year = _source_and_year(parts)
    source_part = f"*{source}*, " if source else ""
    return f'{authors}. "{result.get("title", "")}." {source_part}{year}. Web.'


def chicago_citation(result: Dict[str, Any]) -> str:
    parts = _summary_parts(result)
    authors = parts[0].strip() or UNKNOWN_AUTHOR
    source, year = _source_and_year(parts)
    source_part = f"{source}, " if source else ""
    return f'{authors}. "{result.get("title", "")}." {source_part}{year}. {result.get("link", "")}.'


STYLES = {
    "apa": apa_citation,
    "mla": mla_citation,
    "chicago": chicago_citation,
}


def format_citation(result: Dict[str, Any], style: str = "apa") -> str:
    try:
        fmt = STYLES[style.lower()]
    except KeyError:
        raise ValueError(f"Unknown citation style '{style}' (use one of: {', '.join(STYLES)})")
    return fmt(result)
