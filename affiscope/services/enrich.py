"""Per-site enrichment: pull specs and tags out of a product title."""

import re
from dataclasses import dataclass, field
from typing import Any

MAH_RE = re.compile(r"(\d{4,6})\s*mAh", re.IGNORECASE | re.ASCII)
WH_RE = re.compile(r"(\d{3,4})\s*Wh", re.IGNORECASE | re.ASCII)
WATT_RE = re.compile(r"(\d{2,4})\s*W(?!h)", re.IGNORECASE | re.ASCII)
PD_WATT_RE = re.compile(r"PD\s*([1-9]\d{1,3})\s*W", re.IGNORECASE | re.ASCII)

# (pattern, tag) per site
POWERBANK_TAGS = [
    (re.compile(r"mag\s*saf(e)?", re.IGNORECASE), "MagSafe対応"),
    (re.compile(r"(薄型|スリム)"), "薄型"),
    (re.compile(r"(軽量|\b1?\d{2}g\b)", re.ASCII), "軽量"),
    (re.compile(r"機内持(込|ち)み|飛行機|100Wh", re.IGNORECASE), "機内持込可"),
    (re.compile(r"(PD|Power\s*Delivery|急速)", re.IGNORECASE), "急速充電"),
]

POWERSTATION_TAGS = [
    (re.compile(r"(リン酸鉄|LiFePO4|LFP)", re.IGNORECASE), "LFP"),
    (re.compile(r"(ソーラー|MPPT|PV)", re.IGNORECASE), "ソーラー対応"),
    (re.compile(r"(静音|低騒音)"), "静音"),
]

CHAIR_TAGS = [
    (re.compile(r"(メッシュ|通気)"), "蒸れ対策"),
    (re.compile(r"(腰|ランバー)"), "腰痛対策"),
    (re.compile(r"(オットマン|フットレスト)"), "オットマン"),
]


@dataclass
class Enriched:
    """Category, tags and specs derived from a title."""

    category_id: str | None = None
    tags: list[str] = field(default_factory=list)
    specs: dict[str, Any] = field(default_factory=dict)


def extract_numbers(title: str) -> dict[str, int | None]:
    """Extract capacity (mAh, Wh) and wattage from a title."""
    mah = MAH_RE.search(title)
    wh = WH_RE.search(title)
    watt = WATT_RE.search(title) or PD_WATT_RE.search(title)
    return {
        "mAh": int(mah.group(1)) if mah else None,
        "Wh": int(wh.group(1)) if wh else None,
        "W": int(watt.group(1)) if watt else None,
    }


def _match_tags(title: str, rules: list[tuple[re.Pattern, str]]) -> list[str]:
    tags: list[str] = []
    for pattern, tag in rules:
        if pattern.search(title) and tag not in tags:
            tags.append(tag)
    return tags


def enrich_for_site(site_id: str, title: str, category_fallback: str) -> Enriched:
    """Apply the site's title rules.

    Args:
        site_id: Site the listing was ingested for
        title: Raw product title
        category_fallback: Category used when the site has no rule

    Returns:
        Enriched data; unknown sites get the fallback category only
    """
    if site_id == "powerbank-scope":
        nums = extract_numbers(title)
        specs = {}
        if nums["mAh"]:
            specs["capacity_mAh"] = nums["mAh"]
        if nums["W"]:
            specs["max_output_w"] = nums["W"]
        return Enriched("power-bank", _match_tags(title, POWERBANK_TAGS), specs)

    if site_id == "powerscope":
        nums = extract_numbers(title)
        specs = {}
        if nums["Wh"]:
            specs["capacity_Wh"] = nums["Wh"]
        if nums["W"]:
            specs["ac_output_w"] = nums["W"]
        return Enriched("portable-power", _match_tags(title, POWERSTATION_TAGS), specs)

    if site_id == "chairscope":
        return Enriched("gaming-chair", _match_tags(title, CHAIR_TAGS))

    return Enriched(category_fallback)
