from studydeck.errors import (
    QUOTA_EXCEEDED_MESSAGE,
    ConfigurationFailure,
    FailureKind,
    MalformedResponseFailure,
    QuotaExceededFailure,
    UpstreamFailure,
    classify_upstream_error,
    classify_upstream_message,
    describe_failure,
)


def test_quota_signatures_are_classified() -> None:
    assert classify_upstream_message("You exceeded your current quota, please check") is FailureKind.QUOTA_EXCEEDED
    assert classify_upstream_message("Error code: 429 insufficient_quota") is FailureKind.QUOTA_EXCEEDED
    assert classify_upstream_message("Connection reset by peer") is FailureKind.UPSTREAM


def test_classify_upstream_error_wraps_and_chains() -> None:
    original = RuntimeError("insufficient_quota")
    failure = classify_upstream_error(original)

    assert isinstance(failure, QuotaExceededFailure)
    assert failure.message.startswith(QUOTA_EXCEEDED_MESSAGE)
    assert failure.__cause__ is original

    other = classify_upstream_error(TimeoutError())
    assert isinstance(other, UpstreamFailure)
    assert other.message == "TimeoutError"


def test_classified_failures_pass_through() -> None:
    failure = MalformedResponseFailure("bad")

    assert classify_upstream_error(failure) is failure


def test_describe_failure_gives_actionable_text() -> None:
    assert "OPENAI_API_KEY" in describe_failure(ConfigurationFailure("missing"))
    assert describe_failure(QuotaExceededFailure("quota")) == QUOTA_EXCEEDED_MESSAGE
    assert describe_failure(UpstreamFailure("boom")) == "Processing failed."
