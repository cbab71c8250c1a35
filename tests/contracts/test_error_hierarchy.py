from reviewqueue.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    LedgerError,
    ProviderError,
    ReviewQueueError,
    ScanError,
    SourceError,
    SourceParseError,
)


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigError, ReviewQueueError)
    assert issubclass(SourceError, ReviewQueueError)
    assert issubclass(SourceParseError, SourceError)
    assert issubclass(ProviderError, ReviewQueueError)
    assert issubclass(AuthenticationError, ProviderError)
    assert issubclass(ScanError, ReviewQueueError)
    assert issubclass(LedgerError, ReviewQueueError)


def test_source_error_exposes_source() -> None:
    err = SourceParseError("bad page", source="bors")

    assert err.source == "bors"
    assert str(err) == "bad page"


def test_provider_error_exposes_status_code() -> None:
    assert ProviderError("missing", status_code=404).status_code == 404
    assert AuthenticationError("nope").status_code is None
