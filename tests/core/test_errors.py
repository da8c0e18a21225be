"""Error Hierarchy — codes, statuses and caller-facing envelopes."""

from httprpc.core.errors import (
    ConfigurationError, EncodingError, ErrorCategory, InternalOperationError,
    InvalidArgumentError, MissingResourceError, OperationNotFoundError, RpcError,
    TemplateError,
)


def test_statuses_by_category():
    assert OperationNotFoundError("x").http_status == 404
    assert InvalidArgumentError("bad", "a").http_status == 400
    assert InternalOperationError("x").http_status == 500
    assert EncodingError("bad").http_status == 500
    assert ConfigurationError("bad").category is ErrorCategory.CONFIGURATION


def test_all_errors_share_base():
    for exc in (
        OperationNotFoundError("x"), InvalidArgumentError("bad"),
        InternalOperationError("x"), EncodingError("bad"), ConfigurationError("bad"),
    ):
        assert isinstance(exc, RpcError)


def test_not_found_records_operation():
    exc = OperationNotFoundError("bogus")
    assert exc.operation == "bogus"
    assert exc.to_response()["error"]["context"]["operation"] == "bogus"


def test_internal_error_does_not_expose_cause():
    try:
        try:
            raise ValueError("secret detail")
        except ValueError as cause:
            raise InternalOperationError("fail") from cause
    except InternalOperationError as exc:
        body = exc.to_response()
        assert "secret" not in str(body)
        assert isinstance(exc.__cause__, ValueError)
        assert body["error"]["code"] == "INTERNAL_ERROR"


def test_template_errors():
    missing = MissingResourceError("title")
    assert missing.key == "title"
    assert missing.http_status == 500
    assert missing.category is ErrorCategory.TEMPLATE
    assert TemplateError("bad", "page.txt").template == "page.txt"
    assert isinstance(missing, RpcError)
