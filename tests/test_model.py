import hashlib

import pytest

from voice_api.model.model import (
    AI_LABEL,
    EXPLANATIONS,
    HUMAN_LABEL,
    adjust_probability,
    analyze,
    classify,
    digest_score,
    explain_prediction,
    predict_proba,
)
from voice_api.utils.audio import HeaderFeatures

# away from the clamp bounds, where the rules saturate
BASES = [i / 100 for i in range(3, 98, 3)]

MID = HeaderFeatures(has_encoder_tag=False, has_id3=False, size=50000)
MID_TAGGED = HeaderFeatures(has_encoder_tag=True, has_id3=False, size=50000)
SMALL = HeaderFeatures(has_encoder_tag=False, has_id3=False, size=1000)
LARGE = HeaderFeatures(has_encoder_tag=False, has_id3=False, size=200000)
LARGE_TAGGED = HeaderFeatures(has_encoder_tag=True, has_id3=False, size=200000)


def test_digest_score_matches_sha256_prefix():
    data = b"some audio bytes"
    expected = (int(hashlib.sha256(data).hexdigest()[:8], 16) % 1000) / 1000
    assert digest_score(data) == expected


@pytest.mark.parametrize("data", [b"", b"\x00", b"ID3" + b"\xff" * 300, bytes(range(256)) * 40])
def test_digest_score_is_deterministic_and_bounded(data):
    first = digest_score(data)
    assert digest_score(data) == first
    assert 0.0 <= first <= 0.999


def test_encoder_tag_bonus():
    assert adjust_probability(0.3, MID_TAGGED) == pytest.approx(0.55)
    assert adjust_probability(0.3, MID) == pytest.approx(0.3)


def test_small_file_bonus():
    assert adjust_probability(0.4, SMALL) == pytest.approx(0.55)


def test_large_file_penalty_only_without_tag():
    assert adjust_probability(0.5, LARGE) == pytest.approx(0.4)
    assert adjust_probability(0.5, LARGE_TAGGED) == pytest.approx(0.75)


def test_adjustments_are_clamped():
    tagged_small = HeaderFeatures(has_encoder_tag=True, has_id3=False, size=10)
    assert adjust_probability(0.9, tagged_small) == 0.98
    assert adjust_probability(0.999, tagged_small) == 0.98
    assert adjust_probability(0.05, LARGE) == 0.02
    assert adjust_probability(0.0, LARGE) == 0.02


def test_rules_compound_in_order():
    tagged_small = HeaderFeatures(has_encoder_tag=True, has_id3=False, size=10)
    assert adjust_probability(0.5, tagged_small) == pytest.approx(0.9)
    # first rule saturates, second cannot push past the ceiling
    assert adjust_probability(0.8, tagged_small) == 0.98


@pytest.mark.parametrize("base", BASES)
def test_encoder_tag_never_lowers_p_ai(base):
    assert adjust_probability(base, MID_TAGGED) >= adjust_probability(base, MID)
    assert adjust_probability(base, LARGE_TAGGED) >= adjust_probability(base, LARGE)


@pytest.mark.parametrize("base", BASES)
def test_small_files_score_at_least_padded_ones(base):
    assert adjust_probability(base, SMALL) >= adjust_probability(base, MID)
    assert adjust_probability(base, MID) >= adjust_probability(base, LARGE)


def test_tie_resolves_to_human():
    # 0.25 + 0.25 is exactly 0.5 in binary floating point
    p_ai = adjust_probability(0.25, MID_TAGGED)
    assert p_ai == 0.5
    assert classify(p_ai) == (HUMAN_LABEL, 0.5)


def test_classify_picks_argmax_and_rounds():
    assert classify(0.51) == (AI_LABEL, 0.51)
    assert classify(0.3) == (HUMAN_LABEL, 0.7)
    assert classify(0.98) == (AI_LABEL, 0.98)
    assert classify(0.02) == (HUMAN_LABEL, 0.98)
    assert classify(0.5004) == (AI_LABEL, 0.5)


def test_predict_proba_sums_to_one():
    for base in BASES:
        proba = predict_proba(base)
        assert proba[0] + proba[1] == pytest.approx(1.0)


def test_four_distinct_explanations():
    assert len(set(EXPLANATIONS.values())) == 4
    assert explain_prediction(AI_LABEL, MID_TAGGED) != explain_prediction(AI_LABEL, MID)
    assert explain_prediction(HUMAN_LABEL, MID_TAGGED) != explain_prediction(HUMAN_LABEL, MID)


@pytest.mark.parametrize("data", [
    b"",
    b"ID3\x04\x00" + b"\x00" * 64,
    b"ID3\x04\x00Lavf58.76.100" + b"\x11" * 7000,
    bytes(range(256)) * 500,
])
def test_analyze_is_deterministic_and_bounded(data):
    first = analyze(data)
    second = analyze(data)
    assert first == second
    assert first.classification in (AI_LABEL, HUMAN_LABEL)
    assert 0.0 <= first.confidence_score <= 1.0
    assert first.p_ai + first.p_human == pytest.approx(1.0)
    assert first.explanation == explain_prediction(first.classification, first.features)


def test_analyze_small_untagged_buffer_gets_bonus():
    data = b"\x00" * 10
    verdict = analyze(data)
    assert verdict.p_ai == pytest.approx(min(0.98, digest_score(data) + 0.15))


@pytest.mark.parametrize("size, expected", [
    (4999, 0.55),
    (5000, 0.4),
    (100000, 0.4),
    (100001, 0.3),
])
def test_size_thresholds_are_strict(size, expected):
    features = HeaderFeatures(has_encoder_tag=False, has_id3=False, size=size)
    assert adjust_probability(0.4, features) == pytest.approx(expected)
