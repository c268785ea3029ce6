import pytest

from thumbnails_pipeline.core.exceptions import (
    ConfigurationError,
    FetchError,
    InvocationFailedError,
    ObjectStoreError,
    ResizeError,
    ThumbnailsPipelineError,
    UploadError,
)


@pytest.mark.parametrize(
    "error_class", [ConfigurationError, FetchError, UploadError, ResizeError, InvocationFailedError]
)
def test_errors_share_package_base(error_class) -> None:
    assert issubclass(error_class, ThumbnailsPipelineError)


def test_store_errors_are_object_store_errors() -> None:
    assert issubclass(FetchError, ObjectStoreError)
    assert issubclass(UploadError, ObjectStoreError)
    assert not issubclass(ResizeError, ObjectStoreError)


def test_invocation_failed_carries_summary() -> None:
    error = InvocationFailedError("1 source object(s) could not be fetched", summary={"failed": True})

    assert str(error) == "1 source object(s) could not be fetched"
    assert error.summary == {"failed": True}


def test_invocation_failed_defaults_to_empty_summary() -> None:
    assert InvocationFailedError("boom").summary == {}
