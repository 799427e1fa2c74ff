from cbt_api.prompts import build_prompt


def test_prompt_is_deterministic():
    assert build_prompt("JAMB", "Physics", 3) == build_prompt("JAMB", "Physics", 3)


def test_prompt_varies_with_inputs():
    base = build_prompt("JAMB", "Physics", 3)
    assert build_prompt("WAEC", "Physics", 3) != base
    assert build_prompt("JAMB", "Chemistry", 3) != base
    assert build_prompt("JAMB", "Physics", 4) != base


def test_prompt_names_exam_subject_and_count():
    prompt = build_prompt("NECO", "Biology", 12)
    assert '"NECO"' in prompt
    assert '"Biology"' in prompt
    assert "EXACTLY 12" in prompt


def test_prompt_describes_output_schema():
    prompt = build_prompt("JAMB", "Physics", 3)
    for key in ('"questions"', '"question"', '"options"', '"answer"', '"explanation"'):
        assert key in prompt
    assert "exactly 4" in prompt
    assert "zero-based index" in prompt
