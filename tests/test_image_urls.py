import re
from datetime import datetime, timezone

from services.image_urls import (
    build_object_key,
    object_key_from_url,
    parse_object_key,
    rewrite_url_region,
)

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)


def test_build_object_key_is_lowercase_and_safe():
    key = build_object_key("My Photo.PNG", "image/png", now=FIXED_NOW)
    assert key == "my-photo-png-20240501t093000z.png"
    assert re.fullmatch(r"[a-z0-9.-]+", key)
    assert key.endswith(".png")


def test_build_object_key_is_deterministic_for_a_fixed_clock():
    assert build_object_key("Holiday (1).jpeg", now=FIXED_NOW) == build_object_key("Holiday (1).jpeg", now=FIXED_NOW)


def test_build_object_key_converts_clock_to_utc():
    local = datetime(2024, 5, 1, 11, 30, 0, tzinfo=timezone.utc).astimezone()
    assert "20240501t113000z" in build_object_key("a.png", now=local)


def test_build_object_key_falls_back_to_content_type_extension():
    assert build_object_key("snapshot", "image/webp", now=FIXED_NOW) == "snapshot-20240501t093000z.webp"
    assert build_object_key("snapshot", None, now=FIXED_NOW) == "snapshot-20240501t093000z"


def test_parse_object_key_recovers_parts():
    parts = parse_object_key("my-photo-png-20240501t093000z.png")
    assert parts.title == "my-photo-png"
    assert parts.timestamp == "20240501t093000z"
    assert parts.extension == "png"


def test_object_key_from_virtual_hosted_url():
    url = "https://gallery-test.s3.eu-west-1.amazonaws.com/my%20photo-20240501t093000z.png"
    assert object_key_from_url(url, "gallery-test") == "my photo-20240501t093000z.png"


def test_object_key_from_path_style_url_strips_bucket():
    url = "https://s3.eu-west-1.amazonaws.com/gallery-test/albums%2Fcat.png"
    assert object_key_from_url(url, "gallery-test") == "albums/cat.png"


def test_object_key_from_unparseable_url_uses_last_segment():
    assert object_key_from_url("uploads/cats/tabby%3A1.png", "gallery-test") == "tabby:1.png"


def test_rewrite_url_region_replaces_first_region():
    url = "https://bucket.s3.us-east-1.amazonaws.com/k"
    assert rewrite_url_region(url, "eu-west-1") == "https://bucket.s3.eu-west-1.amazonaws.com/k"


def test_rewrite_url_region_is_idempotent():
    url = "https://bucket.s3.us-east-1.amazonaws.com/k"
    once = rewrite_url_region(url, "eu-west-1")
    assert rewrite_url_region(once, "eu-west-1") == once


def test_rewrite_url_region_without_match_or_region_is_unchanged():
    assert rewrite_url_region("https://cdn.example.com/k.png", "eu-west-1") == "https://cdn.example.com/k.png"
    assert rewrite_url_region("https://bucket.s3.us-east-1.amazonaws.com/k", None) == "https://bucket.s3.us-east-1.amazonaws.com/k"
