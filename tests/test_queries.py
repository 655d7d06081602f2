import pytest

from querysweep.queries import build_queries, query_uri


def test_build_queries_is_prefix_cumulative():
    assert build_queries(["cat", "dog", "bird"]) == ["cat", "cat+dog", "cat+dog+bird"]


@pytest.mark.parametrize("n", [1, 2, 5, 17])
def test_build_queries_one_query_per_word(n):
    words = [f"w{i}" for i in range(n)]
    queries = build_queries(words)

    assert len(queries) == n
    for i, query in enumerate(queries):
        assert query.split("+") == words[: i + 1]


def test_build_queries_keeps_spelling_and_order():
    words = ["Zebra", "apple", "Äpfel", "apple"]
    assert build_queries(words)[-1] == "Zebra+apple+Äpfel+apple"


def test_build_queries_accepts_any_iterable():
    assert build_queries(iter(["a", "b"])) == ["a", "a+b"]


def test_build_queries_rejects_empty_dictionary():
    with pytest.raises(ValueError):
        build_queries([])


def test_query_uri():
    assert query_uri("cat+dog") == "/query?terms=cat+dog"
