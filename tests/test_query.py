from jobboard.pipeline.query import QueryTokens, tokenize_query


def test_or_query_gives_one_group_of_alternatives():
    tokens = tokenize_query("welder OR fabricator")

    assert tokens.required == ()
    assert tokens.groups == (("welder", "fabricator"),)
    assert tokens.matches("Senior Fabricator")
    assert tokens.matches("welder wanted")
    assert not tokens.matches("machinist")


def test_plain_words_are_all_required():
    tokens = tokenize_query("welder cnc")

    assert tokens.required == ("welder", "cnc")
    assert tokens.groups == ()
    assert tokens.matches("CNC welder")
    assert not tokens.matches("welder only")


def test_quoted_phrase_is_one_token():
    tokens = tokenize_query('"metal fabricator"')

    assert tokens.required == ("metal fabricator",)
    assert tokens.matches("Metal Fabricator II")
    assert not tokens.matches("metal shop fabricator")


def test_or_with_phrase():
    tokens = tokenize_query('welder OR "metal fabricator"')

    assert tokens.groups == (("welder", "metal fabricator"),)


def test_or_is_case_insensitive_but_not_inside_words():
    assert tokenize_query("welder or fabricator").groups == (("welder", "fabricator"),)
    assert tokenize_query("color operator").required == ("color", "operator")


def test_empty_query_matches_everything():
    tokens = tokenize_query("   ")

    assert tokens == QueryTokens()
    assert tokens.empty
    assert tokens.matches("anything at all")


def test_only_operators_is_no_constraint():
    for query in ("OR", "OR OR", " or  OR "):
        tokens = tokenize_query(query)
        assert tokens.empty, query
        assert tokens.matches("whatever")


def test_duplicate_tokens_collapse():
    assert tokenize_query("cnc cnc").required == ("cnc",)
    assert tokenize_query("cnc OR cnc").groups == (("cnc",),)
