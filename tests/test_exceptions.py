"""Tests for the exception hierarchy and exit-code mapping."""

from __future__ import annotations

import pytest

from authcode.exceptions import (
    AuthcodeError,
    AuthorizationDeniedError,
    CaptureTimeoutError,
    ConfigError,
    ListenerShutdownError,
    ListenerStartError,
    TokenParseError,
    TokenStatusError,
    TokenTransportError,
)
from authcode.exit_codes import EXIT_GENERIC_FAILURE, EXIT_LISTENER_ERROR


class TestExitCodes:
    def test_base_is_generic_failure(self) -> None:
        assert AuthcodeError("x").exit_code == EXIT_GENERIC_FAILURE

    def test_override(self) -> None:
        assert ConfigError("x", exit_code=42).exit_code == 42

    def test_listener_errors_share_code(self) -> None:
        assert ListenerStartError.exit_code == ListenerShutdownError.exit_code == EXIT_LISTENER_ERROR

    def test_every_kind_is_distinguishable(self) -> None:
        kinds = [
            ConfigError,
            ListenerStartError,
            CaptureTimeoutError,
            AuthorizationDeniedError,
            TokenTransportError,
            TokenStatusError,
            TokenParseError,
        ]
        assert len({kind.exit_code for kind in kinds}) == len(kinds)


class TestWithContext:
    def test_prefixes_message_and_keeps_type(self) -> None:
        original = CaptureTimeoutError("timed out waiting for code after 60s")
        wrapped = original.with_context("failed to get code")

        assert type(wrapped) is CaptureTimeoutError
        assert str(wrapped) == "failed to get code: timed out waiting for code after 60s"
        assert str(original) == "timed out waiting for code after 60s"

    def test_keeps_extra_attributes(self) -> None:
        original = TokenStatusError("unexpected status code: 400", status_code=400, body="{}")
        wrapped = original.with_context("failed to exchange code")

        assert isinstance(wrapped, TokenStatusError)
        assert wrapped.status_code == 400
        assert wrapped.body == "{}"

    def test_keeps_overridden_exit_code(self) -> None:
        wrapped = TokenParseError("bad", exit_code=99).with_context("stage")
        assert wrapped.exit_code == 99

    def test_raise_from_chains_original(self) -> None:
        original = ListenerStartError("server failed: busy")
        with pytest.raises(ListenerStartError) as exc_info:
            raise original.with_context("failed to get code") from original
        assert exc_info.value.__cause__ is original
