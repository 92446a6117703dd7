"""Unit tests for request options."""

import pytest
from pydantic import ValidationError

from resilient_fetch.features.fetch.options import (
    RequestOptions,
    SslOptions,
    split_header_line,
)


class TestSplitHeaderLine:
    """Tests for header line parsing."""

    def test_splits_name_and_value(self) -> None:
        """Test a simple header line."""
        assert split_header_line("Foo: Bar") == ("Foo", "Bar")

    def test_value_may_contain_colons(self) -> None:
        """Test that only the first colon separates name and value."""
        assert split_header_line("X-Time: 12:30:00") == ("X-Time", "12:30:00")

    def test_empty_value(self) -> None:
        """Test a header with an empty value."""
        assert split_header_line("X-Empty:") == ("X-Empty", "")

    @pytest.mark.parametrize(
        "line",
        ["NoColon", ": value", "Bad Name: value", "X-Inject: a\r\nEvil: b"],
    )
    def test_malformed_lines_rejected(self, line: str) -> None:
        """Test that malformed header lines raise ValueError."""
        with pytest.raises(ValueError, match="Malformed header line"):
            split_header_line(line)


class TestRequestOptions:
    """Tests for RequestOptions."""

    def test_defaults(self) -> None:
        """Test default options are empty."""
        options = RequestOptions()

        assert options.headers == ()
        assert options.query_parameters == ()
        assert options.ssl_options.certificate_authority_file_path is None

    def test_add_header_returns_new_instance(self) -> None:
        """Test that add_header leaves the original untouched."""
        base = RequestOptions()
        updated = base.add_header("Foo: Bar")

        assert base.headers == ()
        assert updated.headers == ("Foo: Bar",)

    def test_add_header_appends_in_order(self) -> None:
        """Test that headers keep insertion order and duplicates."""
        options = (
            RequestOptions()
            .add_header("Accept: text/plain")
            .add_header("X-Tag: a")
            .add_header("X-Tag: b")
        )

        assert options.header_pairs() == [
            ("Accept", "text/plain"),
            ("X-Tag", "a"),
            ("X-Tag", "b"),
        ]

    def test_add_malformed_header_rejected(self) -> None:
        """Test that malformed header lines are rejected."""
        with pytest.raises(ValidationError):
            RequestOptions().add_header("not a header")

    def test_with_query_parameters_replaces(self) -> None:
        """Test that query parameters are replaced, not merged."""
        options = (
            RequestOptions()
            .with_query_parameters({"a": "1"})
            .with_query_parameters({"b": "2"})
        )

        assert options.query_parameters == (("b", "2"),)

    def test_query_parameters_copied(self) -> None:
        """Test that later changes to the caller's dict do not leak in."""
        params = {"foo": "bar"}
        options = RequestOptions().with_query_parameters(params)
        params["foo"] = "changed"

        assert options.query_parameters == (("foo", "bar"),)

    def test_query_parameters_not_mutable_in_place(self) -> None:
        """Test that stored parameters cannot be changed after construction."""
        options = RequestOptions().with_query_parameters({"foo": "bar"})

        with pytest.raises(TypeError):
            options.query_parameters["foo"] = "baz"  # type: ignore[index]

        assert dict(options.query_parameters) == {"foo": "bar"}

    def test_certificate_authority_path(self) -> None:
        """Test setting the CA bundle path."""
        options = RequestOptions().with_certificate_authority_file_path("/tmp/ca.pem")

        assert options.ssl_options.certificate_authority_file_path == "/tmp/ca.pem"

    def test_ssl_options_keep_headers(self) -> None:
        """Test that changing TLS settings keeps headers and parameters."""
        options = (
            RequestOptions()
            .add_header("Foo: Bar")
            .with_query_parameters({"q": "1"})
            .with_ssl_options(SslOptions(certificate_authority_file_path="ca.pem"))
        )

        assert options.headers == ("Foo: Bar",)
        assert options.query_parameters == (("q", "1"),)

    def test_has_header_case_insensitive(self) -> None:
        """Test header lookup ignores case."""
        options = RequestOptions().add_header("User-Agent: test")

        assert options.has_header("user-agent")
        assert not options.has_header("Accept")

    def test_options_immutable(self) -> None:
        """Test that options are frozen."""
        options = RequestOptions()

        with pytest.raises(ValidationError):
            options.headers = ("Foo: Bar",)  # type: ignore[misc]
