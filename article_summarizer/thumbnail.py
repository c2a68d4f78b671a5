"""Representative image selection for the summary artifact."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .config import CONTENT_SELECTORS
from .models import ImageCandidate, ImageSource

logger = logging.getLogger("article_summarizer.thumbnail")

MIN_IMAGE_SIDE = 100
LARGE_IMAGE_SIDE = 300

# Checked in this order; the first present tag wins the meta tier.
META_IMAGE_SELECTORS = (
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('meta[property="og:image:url"]', "content"),
    ('link[rel="image_src"]', "href"),
)

UNWANTED_URL_TERMS = (
    "/favicon",
    "/icon",
    "/logo",
    "/avatar",
    "/ad/",
    "/ads/",
    "favicon.",
    "logo.",
    "icon.",
    "avatar.",
    "sprite.",
    "placeholder",
    "default",
    "thumb",
    "mini",
)
UNWANTED_ALT_TERMS = (
    "icon",
    "logo",
    "avatar",
    "advertisement",
    "sponsor",
    "favicon",
    "button",
    "arrow",
    "bullet",
)
UNWANTED_CLASS_TERMS = (
    "icon",
    "logo",
    "avatar",
    "advertisement",
    "favicon",
    "sprite",
    "button",
)
# "ad" is only a marker as a standalone token, not inside "header" or "loaded".
_AD_TOKEN = re.compile(r"(?<![a-z])ads?(?![a-z])")


def resolve_url(image_url: str, base_url: str) -> str:
    """Resolve relative and protocol-relative image URLs against ``base_url``."""
    image_url = image_url.strip()
    if image_url.startswith(("http://", "https://", "data:")):
        return image_url
    try:
        return urljoin(base_url, image_url)
    except ValueError:
        return image_url


def _parse_dimension(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = re.match(r"\s*(\d+)", str(value))
    if not match:
        return None
    number = int(match.group(1))
    return number or None


def _image_src(img: Tag) -> Optional[str]:
    src = img.get("src") or img.get("data-src")
    if isinstance(src, list):
        src = " ".join(src)
    return src.strip() if src and src.strip() else None


def _candidate_from_img(img: Tag, base_url: str, source: ImageSource) -> Optional[ImageCandidate]:
    src = _image_src(img)
    if src is None:
        return None
    css_class = img.get("class") or []
    if isinstance(css_class, str):
        css_class = css_class.split()
    return ImageCandidate(
        url=resolve_url(src, base_url),
        source=source,
        width=_parse_dimension(img.get("width")),
        height=_parse_dimension(img.get("height")),
        alt_text=(img.get("alt") or "").strip(),
        css_class=" ".join(css_class),
    )


def collect_candidates(
    soup: BeautifulSoup,
    base_url: str,
    content_selectors: Sequence[str] = CONTENT_SELECTORS,
) -> List[ImageCandidate]:
    """Gather meta, article-region and general image candidates in priority order."""
    candidates: List[ImageCandidate] = []
    seen: Set[str] = set()

    for selector, attribute in META_IMAGE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = element.get(attribute)
        if value and value.strip():
            url = resolve_url(value, base_url)
            candidates.append(ImageCandidate(url=url, source=ImageSource.META))
            seen.add(url)

    captured: Set[int] = set()
    for selector in content_selectors:
        for img in soup.select(f"{selector} img"):
            candidate = _candidate_from_img(img, base_url, ImageSource.ARTICLE)
            captured.add(id(img))
            if candidate is None or candidate.url in seen:
                continue
            seen.add(candidate.url)
            candidates.append(candidate)

    for img in soup.find_all("img"):
        if id(img) in captured:
            continue
        candidate = _candidate_from_img(img, base_url, ImageSource.GENERAL)
        if candidate is None or candidate.url in seen:
            continue
        seen.add(candidate.url)
        candidates.append(candidate)
    return candidates


def is_unwanted(candidate: ImageCandidate) -> bool:
    url = candidate.url.lower()
    alt = candidate.alt_text.lower()
    css_class = candidate.css_class.lower()

    if url.startswith("data:"):
        return True
    if (candidate.width and candidate.width < MIN_IMAGE_SIDE) or (
        candidate.height and candidate.height < MIN_IMAGE_SIDE
    ):
        return True
    if any(term in url for term in UNWANTED_URL_TERMS):
        return True
    if any(term in alt for term in UNWANTED_ALT_TERMS) or _AD_TOKEN.search(alt):
        return True
    if any(term in css_class for term in UNWANTED_CLASS_TERMS) or _AD_TOKEN.search(css_class):
        return True
    return False


def _is_large(candidate: ImageCandidate) -> bool:
    return bool(
        (candidate.width and candidate.width > LARGE_IMAGE_SIDE)
        or (candidate.height and candidate.height > LARGE_IMAGE_SIDE)
    )


def pick_best(candidates: Iterable[ImageCandidate]) -> Optional[str]:
    """Pick one URL from the highest-priority non-empty tier."""
    pool = list(candidates)
    for source in ImageSource:
        tier = [candidate for candidate in pool if candidate.source is source]
        if not tier:
            continue
        if source is ImageSource.META:
            return tier[0].url
        large = [candidate for candidate in tier if _is_large(candidate)]
        return (large or tier)[0].url
    return None


def select_thumbnail_from_soup(
    soup: BeautifulSoup,
    base_url: str,
    content_selectors: Sequence[str] = CONTENT_SELECTORS,
) -> Optional[str]:
    candidates = collect_candidates(soup, base_url, content_selectors)
    kept = [candidate for candidate in candidates if not is_unwanted(candidate)]
    logger.debug("Thumbnail candidates: %d collected, %d kept", len(candidates), len(kept))
    return pick_best(kept)


def select_thumbnail(html: str, base_url: str) -> Optional[str]:
    """Return the most representative image URL in ``html``, or ``None``."""
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        return select_thumbnail_from_soup(soup, base_url)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Error extracting thumbnail from %s", base_url)
        return None
