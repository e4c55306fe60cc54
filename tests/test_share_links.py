from services.common.share import embed_snippet, share_url, token_from_url


def test_share_url_replaces_fragment():
    assert share_url("abc", "https://charts.example/app#old") == "https://charts.example/app#abc"
    assert share_url("abc", "https://charts.example/") == "https://charts.example/#abc"


def test_token_from_url():
    assert token_from_url("https://charts.example/#abc-_1") == "abc-_1"
    assert token_from_url("https://charts.example/") is None


def test_embed_snippet_escapes_url():
    snippet = embed_snippet('https://charts.example/?a=1&b="2"#tok')
    assert snippet.startswith('<iframe src="https://charts.example/?a=1&amp;b=&#34;2&#34;#tok"')
    assert "min-height:460px" in snippet
    assert snippet.endswith("</iframe>")
