import pytest

from shared.validators import parse_cors_origins, parse_string_list


class TestParseStringList:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ('["http://a.com","http://b.com"]', ["http://a.com", "http://b.com"]),
            ("http://a.com,http://b.com", ["http://a.com", "http://b.com"]),
            (" http://a.com , http://b.com ", ["http://a.com", "http://b.com"]),
            ("a,,b,", ["a", "b"]),
            (["x", "y"], ["x", "y"]),
        ],
    )
    def test_accepted_forms(self, value, expected):
        assert parse_string_list(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", ",", ",,,", "[]", []])
    def test_empty_rejected_by_default(self, value):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_string_list(value)

    @pytest.mark.parametrize("value", ["", "[]", []])
    def test_empty_allowed_when_requested(self, value):
        assert parse_string_list(value, allow_empty=True) == []

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Invalid JSON array"):
            parse_string_list('["a",')

    def test_json_mixed_types_array_raises(self):
        with pytest.raises(ValueError, match="array of strings"):
            parse_string_list('["a", 1]')


class TestParseCorsOrigins:
    def test_strips_trailing_slash(self):
        assert parse_cors_origins("http://localhost:5173/") == ["http://localhost:5173"]

    def test_keeps_port_and_https(self):
        origins = parse_cors_origins('["https://hub.example", "http://localhost:3000"]')
        assert origins == ["https://hub.example", "http://localhost:3000"]

    def test_empty_allowed(self):
        assert parse_cors_origins("") == []

    def test_wildcard_rejected(self):
        with pytest.raises(ValueError, match="Wildcard"):
            parse_cors_origins("*")

    @pytest.mark.parametrize("origin", ["localhost:5173", "ftp://files.example", "https://hub.example/app", "https://"])
    def test_malformed_origin_rejected(self, origin):
        with pytest.raises(ValueError, match="Invalid CORS origin"):
            parse_cors_origins(origin)
