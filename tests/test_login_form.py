from urllib.parse import unquote

from sunvoy_auth.login_form import build_login_body, cookie_pair, extract_nonce, extract_set_cookies


def test_extract_nonce_from_hidden_input():
    html = '<form><input type="hidden" name="nonce" value="abc123"></form>'
    assert extract_nonce(html) == "abc123"


def test_extract_nonce_attribute_order_does_not_matter():
    html = "<form><input value='xyz789' type='hidden' name='nonce'/></form>"
    assert extract_nonce(html) == "xyz789"


def test_extract_nonce_missing_returns_empty():
    assert extract_nonce("<form><input name='username'></form>") == ""
    assert extract_nonce("") == ""
    assert extract_nonce("not html at all <<<") == ""


def test_extract_nonce_skips_empty_value():
    html = '<input name="nonce" value=""><input name="nonce" value="second">'
    assert extract_nonce(html) == "second"


def test_cookie_pair_strips_attributes():
    assert cookie_pair("sid=abc; Path=/; HttpOnly") == "sid=abc"
    assert cookie_pair("plain=1") == "plain=1"


def test_extract_set_cookies_keeps_each_header(make_response):
    response = make_response(200, "", [
        "sid=abc; Path=/; Expires=Wed, 21 Oct 2026 07:28:00 GMT",
        "lang=en; Path=/",
    ])
    assert extract_set_cookies(response) == ["sid=abc", "lang=en"]


def test_extract_set_cookies_without_header(make_response):
    assert extract_set_cookies(make_response(200)) == []


def test_build_login_body_encodes_like_uri_component():
    body = build_login_body("user+tag@example.org", "p@ss word&=", "n/1")

    assert body == "username=user%2Btag%40example.org&password=p%40ss%20word%26%3D&nonce=n%2F1"
    assert unquote(body.split("&")[1].split("=", 1)[1]) == "p@ss word&="
