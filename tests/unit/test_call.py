"""Unit tests for call metadata."""

import pytest
from pydantic import ValidationError

from rpcenv.call import CallContext, CallMetadata, CallMetadataSource


class TestCallMetadata:
    """Tests for CallMetadata."""

    def test_from_url(self) -> None:
        call = CallMetadata.from_url(
            "grpc://10.0.0.5:50051/demo.Greeter?application=shop&timeout=3"
        )

        assert call.protocol == "grpc"
        assert call.host == "10.0.0.5"
        assert call.port == 50051
        assert call.path == "demo.Greeter"
        assert call.parameter("timeout") == "3"
        assert call.application_name == "shop"

    def test_service_identity_plain(self) -> None:
        call = CallMetadata(path="demo.Greeter")
        assert call.service_identity == "demo.Greeter"

    def test_service_identity_with_group_and_version(self) -> None:
        call = CallMetadata(
            path="greeter",
            parameters={"interface": "demo.Greeter", "group": "blue", "version": "1.0.0"},
        )
        assert call.service_identity == "blue/demo.Greeter:1.0.0"

    def test_blank_parameter_is_absent(self) -> None:
        call = CallMetadata.from_url("grpc://host/demo.Greeter?application=")
        assert call.parameter("application") is None
        assert call.application_name is None

    def test_method_parameter(self) -> None:
        call = CallMetadata(parameters={"hello.timeout": "1", "timeout": "3"})
        assert call.method_parameter("hello", "timeout") == "1"
        assert call.method_parameter("bye", "timeout") is None

    def test_frozen(self) -> None:
        call = CallMetadata(path="demo.Greeter")
        with pytest.raises(ValidationError):
            call.path = "other"  # type: ignore[misc]

    def test_satisfies_call_context(self) -> None:
        assert isinstance(CallMetadata(), CallContext)


class _PlainContext:
    """Context without method-scoped parameters."""

    application_name = "shop"
    service_identity = "demo.Greeter"

    def parameter(self, key: str) -> str | None:
        return {"timeout": "3", "hello.timeout": "1"}.get(key)


class TestCallMetadataSource:
    """Tests for CallMetadataSource."""

    def test_method_override_first(self) -> None:
        call = CallMetadata(parameters={"hello.timeout": "1", "timeout": "3"})
        assert CallMetadataSource(call, "hello").lookup("timeout") == "1"
        assert CallMetadataSource(call, "bye").lookup("timeout") == "3"
        assert CallMetadataSource(call).lookup("timeout") == "3"

    def test_plain_context_uses_parameter(self) -> None:
        source = CallMetadataSource(_PlainContext(), "hello")
        assert source.lookup("timeout") == "3"

    def test_missing_is_absent(self) -> None:
        assert CallMetadataSource(CallMetadata()).lookup("timeout") is None
