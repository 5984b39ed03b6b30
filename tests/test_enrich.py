"""Tests for per-site title enrichment."""

from affiscope.services.enrich import enrich_for_site, extract_numbers


def test_extract_numbers():
    nums = extract_numbers("モバイルバッテリー 10000mAh PD 20W")
    assert nums == {"mAh": 10000, "Wh": None, "W": 20}


def test_extract_numbers_ignores_wh_as_watts():
    nums = extract_numbers("ポータブル電源 512Wh 600W")
    assert nums["Wh"] == 512
    assert nums["W"] == 600


def test_powerbank_site():
    enriched = enrich_for_site(
        "powerbank-scope", "モバイルバッテリー 10000mAh PD 20W 薄型", "auto"
    )
    assert enriched.category_id == "power-bank"
    assert enriched.specs == {"capacity_mAh": 10000, "max_output_w": 20}
    assert enriched.tags == ["薄型", "急速充電"]


def test_powerstation_site():
    enriched = enrich_for_site("powerscope", "ポータブル電源 1024Wh 1500W リン酸鉄 ソーラー", "auto")
    assert enriched.category_id == "portable-power"
    assert enriched.specs == {"capacity_Wh": 1024, "ac_output_w": 1500}
    assert enriched.tags == ["LFP", "ソーラー対応"]


def test_chair_site_has_tags_only():
    enriched = enrich_for_site("chairscope", "ゲーミングチェア メッシュ ランバーサポート", "auto")
    assert enriched.category_id == "gaming-chair"
    assert enriched.tags == ["蒸れ対策", "腰痛対策"]
    assert enriched.specs == {}


def test_unknown_site_uses_fallback():
    enriched = enrich_for_site("other", "anything 10000mAh", "auto")
    assert enriched.category_id == "auto"
    assert enriched.tags == []
    assert enriched.specs == {}


def test_weight_next_to_kana_is_tagged_light():
    enriched = enrich_for_site("powerbank-scope", "モバイルバッテリー150gコンパクト", "auto")
    assert enriched.tags == ["軽量"]


def test_full_width_digits_are_not_extracted():
    nums = extract_numbers("バッテリー １００００mAh ６５W")
    assert nums == {"mAh": None, "Wh": None, "W": None}
