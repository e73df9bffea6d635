"""
Tests for Request Builder
"""

import base64

from ..tools.request_builder import (
    DEFAULT_USER_AGENT,
    build_headers,
    build_request,
    merge_headers,
)


class TestBuildHeaders:
    """Tests for header construction"""

    def test_defaults(self, make_agent):
        headers = build_headers(make_agent())

        assert headers == {
            "Content-Type": "application/json",
            "User-Agent": DEFAULT_USER_AGENT,
        }

    def test_content_type_follows_payload_format(self, make_agent):
        assert build_headers(make_agent(payload_format="xml"))["Content-Type"] == "application/xml"
        assert (
            build_headers(make_agent(payload_format="form_data"))["Content-Type"]
            == "application/x-www-form-urlencoded"
        )

    def test_bearer_for_api_key_and_bearer_token(self, make_agent):
        for method in ("api_key", "bearer_token"):
            headers = build_headers(make_agent(auth_method=method, auth_secret="s3cret"))
            assert headers["Authorization"] == "Bearer s3cret"

    def test_basic_auth(self, make_agent):
        headers = build_headers(make_agent(auth_method="basic_auth", auth_secret="ada:pw"))

        assert headers["Authorization"] == "Basic " + base64.b64encode(b"ada:pw").decode()

    def test_no_authorization_without_secret(self, make_agent):
        assert "Authorization" not in build_headers(make_agent(auth_method="api_key"))
        assert "Authorization" not in build_headers(make_agent(auth_method="oauth", auth_secret="x"))

    def test_custom_headers_win_case_insensitively(self, make_agent):
        agent = make_agent(
            auth_method="api_key",
            auth_secret="s3cret",
            headers={"content-type": "text/csv", "authorization": "Token abc", "X-Trace": "1"},
        )

        headers = build_headers(agent)

        assert headers == {
            "User-Agent": DEFAULT_USER_AGENT,
            "content-type": "text/csv",
            "authorization": "Token abc",
            "X-Trace": "1",
        }

    def test_custom_user_agent(self, make_agent):
        assert build_headers(make_agent(), user_agent="probe/2")["User-Agent"] == "probe/2"


class TestMergeHeaders:
    """Tests for merge_headers"""

    def test_values_are_stringified(self):
        assert merge_headers({}, {"X-Retry": 3}) == {"X-Retry": "3"}


class TestBuildRequest:
    """Tests for build_request"""

    def test_get_has_no_body(self, make_agent):
        agent = make_agent(query_params={"q": "Berlin"}, body_template='{"ignored": true}')

        request = build_request(agent)

        assert request["method"] == "GET"
        assert request["url"] == "https://api.example.com/weather"
        assert request["params"] == {"q": "Berlin"}
        assert "content" not in request

    def test_body_sent_verbatim_for_body_methods(self, make_agent):
        for method in ("POST", "PUT", "PATCH"):
            request = build_request(make_agent(method=method, body_template='{"city": "{{city}}"}'))
            assert request["content"] == '{"city": "{{city}}"}'

    def test_delete_has_no_body(self, make_agent):
        assert "content" not in build_request(make_agent(method="DELETE", body_template="x"))
