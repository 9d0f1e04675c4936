from hackathon_recs.tokens import estimate_token_count


def test_counts_words_split_on_punctuation():
    assert estimate_token_count("Hello, world! Go.") == 3


def test_absent_or_empty_text_is_zero():
    assert estimate_token_count(None) == 0
    assert estimate_token_count("") == 0
    assert estimate_token_count("   \n\t ") == 0


def test_brackets_and_curly_quotes_are_separators():
    text = "“quoted” ‘text’ (x) [y] {z}"
    assert estimate_token_count(text) == 5


def test_colons_and_semicolons_split_without_spaces():
    assert estimate_token_count("a;b:c") == 3


def test_apostrophe_splits_contractions():
    # Approximation only: "don't" counts as two segments.
    assert estimate_token_count("don't") == 2


def test_hyphens_and_digits_stay_in_one_segment():
    assert estimate_token_count("state-of-the-art 2025") == 2
