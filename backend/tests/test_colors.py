import os
import subprocess
import sys

from weekgrid.services.colors import (
    PALETTE,
    SPECIAL_CARE_CATEGORY,
    assign_color,
    least_used_variant,
    stable_hash,
    subject_category,
)


def test_subject_keywords_map_to_fixed_categories():
    assert assign_color("信息科技") == "info"
    assert assign_color("三年级数学") == "math"
    assert assign_color("English Reading", arrangement_id=7) == "english"
    assert subject_category("Homeroom") is None


def test_latin_keywords_match_whole_words_only():
    assert subject_category("Art Club") == "art"
    assert subject_category("Mathematics 3A") == "math"
    assert subject_category("Smart Club") is None
    assert subject_category("Aftermath talk") is None
    assert subject_category("Party planning") is None
    assert assign_color("Smart Club", arrangement_id=42) in PALETTE


def test_generic_courses_use_the_id_hash():
    color = assign_color("Homeroom", arrangement_id=42)
    assert color in PALETTE
    assert color == PALETTE[stable_hash("42") % len(PALETTE)]
    assert all(assign_color("Homeroom", arrangement_id=42) == color for _ in range(10))


def test_stable_hash_is_stable_across_processes():
    code = "from weekgrid.services.colors import stable_hash; print(stable_hash('1234'))"
    outputs = set()
    for seed in ("1", "2"):
        env = {**os.environ, "PYTHONPATH": os.pathsep.join(sys.path), "PYTHONHASHSEED": seed}
        result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, check=True, env=env)
        outputs.add(result.stdout.strip())
    assert outputs == {str(stable_hash("1234"))}


def test_least_used_variant_balances_and_prefers_lowest():
    assert least_used_variant([]) == "general-1"
    assert least_used_variant(["general-1", "general-2", "info"]) == "general-3"
    rendered = list(PALETTE) + ["general-1", "general-2", "general-4", "general-5"]
    assert least_used_variant(rendered) == "general-3"


def test_without_id_the_load_balancer_picks_a_variant():
    assert assign_color("Homeroom", rendered_categories=["general-1"]) == "general-2"


def test_special_care_category_is_distinct():
    assert SPECIAL_CARE_CATEGORY not in PALETTE
