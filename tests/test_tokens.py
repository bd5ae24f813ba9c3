from docqa.modules.qa import tokens


class WordEncoding:
    def encode(self, text):
        return text.split()


def test_empty_text_counts_zero_tokens():
    assert tokens.count_tokens("") == 0


def test_unknown_model_falls_back_to_cl100k(monkeypatch):
    requested = []

    def unknown_model(model):
        raise KeyError(model)

    def get_encoding(name):
        requested.append(name)
        return WordEncoding()

    monkeypatch.setattr(tokens.tiktoken, "encoding_for_model", unknown_model)
    monkeypatch.setattr(tokens.tiktoken, "get_encoding", get_encoding)
    tokens.get_encoding.cache_clear()
    try:
        assert tokens.count_tokens("uno dos tres", model="some-private-model") == 3
        assert requested == ["cl100k_base"]
    finally:
        tokens.get_encoding.cache_clear()


def test_encoding_is_cached_per_model(monkeypatch):
    calls = []

    def encoding_for_model(model):
        calls.append(model)
        return WordEncoding()

    monkeypatch.setattr(tokens.tiktoken, "encoding_for_model", encoding_for_model)
    tokens.get_encoding.cache_clear()
    try:
        tokens.count_tokens("a b", model="gpt-test")
        tokens.count_tokens("c d e", model="gpt-test")
        assert calls == ["gpt-test"]
    finally:
        tokens.get_encoding.cache_clear()
