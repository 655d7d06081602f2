QUERY_SEPARATOR = "+"
QUERY_PATH = "/query?terms="


def build_queries(dictionary):
    """Return the prefix-cumulative queries: word1, word1+word2, ..."""
    words = list(dictionary)
    if len(words) == 0:
        raise ValueError("cannot build queries from an empty dictionary")

    queries = []
    for i in range(len(words)):
        queries.append(QUERY_SEPARATOR.join(words[: i + 1]))
    return queries


def query_uri(query):
    return f"{QUERY_PATH}{query}"
